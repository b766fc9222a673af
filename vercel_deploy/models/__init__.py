"""Data models for the deploy pipeline."""

from vercel_deploy.models.outcome import (
    DeploymentOutcome,
    ManagedComment,
    PRContext,
)
from vercel_deploy.models.plan import (
    DEFAULT_ALIAS_DOMAIN,
    DEFAULT_NODE_VERSION,
    DEFAULT_STAGE_TIMEOUT,
    DEFAULT_VERCEL_CLI,
    Environment,
    ExecutionPlan,
    PackageManager,
)
from vercel_deploy.models.stage import (
    STAGE_STATES,
    PipelineState,
    StageName,
    StageResult,
)

__all__ = [
    # Plan models
    "Environment",
    "PackageManager",
    "ExecutionPlan",
    "DEFAULT_ALIAS_DOMAIN",
    "DEFAULT_NODE_VERSION",
    "DEFAULT_STAGE_TIMEOUT",
    "DEFAULT_VERCEL_CLI",
    # Stage models
    "StageName",
    "PipelineState",
    "StageResult",
    "STAGE_STATES",
    # Outcome models
    "DeploymentOutcome",
    "PRContext",
    "ManagedComment",
]
