"""Core pipeline functionality."""

from vercel_deploy.core.alias import AliasResolver, compute_alias
from vercel_deploy.core.comments import (
    COMMENT_MARKER,
    CommentChannel,
    CommentReconciler,
    GitHubCommentChannel,
)
from vercel_deploy.core.context import load_pr_context
from vercel_deploy.core.exceptions import (
    AliasBindingFailure,
    CommentReconcileFailure,
    DeployPipelineError,
    InvalidConfiguration,
    LaunchFailure,
    StageFailure,
    StageTimeout,
    URLParseFailure,
)
from vercel_deploy.core.pipeline import PipelineEngine
from vercel_deploy.core.reporter import GitHubActionsSink, InMemorySink, report
from vercel_deploy.core.resolver import resolve_plan
from vercel_deploy.core.runner import CommandRunner, SubprocessRunner

__all__ = [
    "DeployPipelineError",
    "InvalidConfiguration",
    "LaunchFailure",
    "StageFailure",
    "StageTimeout",
    "URLParseFailure",
    "AliasBindingFailure",
    "CommentReconcileFailure",
    "resolve_plan",
    "CommandRunner",
    "SubprocessRunner",
    "PipelineEngine",
    "AliasResolver",
    "compute_alias",
    "COMMENT_MARKER",
    "CommentChannel",
    "CommentReconciler",
    "GitHubCommentChannel",
    "load_pr_context",
    "GitHubActionsSink",
    "InMemorySink",
    "report",
]
