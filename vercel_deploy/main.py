"""Command-line entry point for a CI pipeline run."""

import asyncio
import sys
from pathlib import Path

from vercel_deploy import __version__
from vercel_deploy.config import Settings, get_settings
from vercel_deploy.core.comments import CommentChannel, CommentReconciler, GitHubCommentChannel
from vercel_deploy.core.context import load_pr_context
from vercel_deploy.core.exceptions import CommentReconcileFailure, InvalidConfiguration
from vercel_deploy.core.pipeline import PipelineEngine
from vercel_deploy.core.reporter import GitHubActionsSink, ReportSink, report
from vercel_deploy.core.resolver import resolve_plan
from vercel_deploy.core.runner import CommandRunner, SubprocessRunner
from vercel_deploy.models.outcome import DeploymentOutcome, PRContext
from vercel_deploy.utils.logging import bind_run_context, configure_logging, get_logger

logger = get_logger(__name__)

EXIT_SUCCESS = 0
EXIT_DEPLOY_FAILED = 1
EXIT_INVALID_CONFIG = 2


def _reconcile_comment(
    settings: Settings,
    pr_context: PRContext,
    outcome: DeploymentOutcome,
    channel: CommentChannel | None,
) -> str | None:
    """Post or update the PR comment; returns an error message on failure."""
    try:
        if channel is None:
            channel = GitHubCommentChannel(
                settings.github_token,
                pr_context.repository,
                base_url=settings.github_api_url,
            )
        CommentReconciler(channel).reconcile(pr_context, outcome)
    except CommentReconcileFailure as e:
        logger.warning("run.comment_failed", error=e.message)
        return e.message
    return None


async def run_pipeline(
    settings: Settings,
    runner: CommandRunner | None = None,
    channel: CommentChannel | None = None,
    sink: ReportSink | None = None,
) -> int:
    """Run one full pipeline and return the process exit status.

    Args:
        settings: Run settings
        runner: Command runner (defaults to local subprocesses)
        channel: Comment channel (defaults to GitHub)
        sink: Output sink (defaults to the GitHub Actions files)

    Returns:
        0 when the deployment succeeded, non-zero otherwise
    """
    sink = sink or GitHubActionsSink(settings.github_output, settings.github_step_summary)
    repo_root = Path(settings.github_workspace or Path.cwd())

    try:
        plan = resolve_plan(settings.run_parameters(), repo_root)
    except InvalidConfiguration as e:
        logger.error("run.invalid_configuration", field=e.field, error=e.message)
        report(None, None, sink, config_error=e.message)
        return EXIT_INVALID_CONFIG

    pr_context = load_pr_context(
        settings.github_event_path,
        settings.github_repository,
        event_name=settings.github_event_name,
        head_ref=settings.github_head_ref,
        base_ref=settings.github_base_ref,
        ref_name=settings.github_ref_name,
        sha=settings.github_sha,
    )
    bind_run_context(
        project=plan.project_name,
        environment=plan.environment.value,
        pr_number=pr_context.pr_number,
    )

    runner = runner or SubprocessRunner(redact=[plan.vercel_token, settings.github_token])
    outcome = await PipelineEngine(runner).run(plan, pr_context)

    comment_error = None
    if pr_context.has_pull_request:
        comment_error = _reconcile_comment(settings, pr_context, outcome, channel)
    else:
        logger.info("run.comment_skipped", reason="no_pull_request")

    report(outcome, pr_context, sink, comment_error=comment_error)

    logger.info(
        "run.finished",
        success=outcome.success,
        deployment_url=outcome.deployment_url,
        alias_url=outcome.alias_url,
    )
    return EXIT_SUCCESS if outcome.success else EXIT_DEPLOY_FAILED


def main() -> None:
    """Console script entry point."""
    settings = get_settings()
    configure_logging(settings)
    logger.info("run.starting", version=__version__)
    sys.exit(asyncio.run(run_pipeline(settings)))


if __name__ == "__main__":
    main()
