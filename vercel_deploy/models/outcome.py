"""Deployment outcome and pull request data models."""

from datetime import datetime

from pydantic import BaseModel, Field

from vercel_deploy.models.plan import Environment
from vercel_deploy.models.stage import StageName, StageResult


class DeploymentOutcome(BaseModel):
    """Terminal result of a pipeline run."""

    success: bool
    environment: Environment = Environment.PREVIEW

    deployment_url: str | None = None
    alias_url: str | None = None
    inspect_url: str | None = None

    failing_stage: StageName | None = None
    error_kind: str | None = None
    diagnostic: str | None = None

    # Non-fatal alias problems
    alias_error: str | None = None

    stages: list[StageResult] = Field(default_factory=list, exclude=True)


class PRContext(BaseModel):
    """Pull request context derived from the triggering event."""

    pr_number: int | None = None
    repository: str = ""
    head_ref: str = ""
    base_ref: str = ""
    sha: str | None = None

    @property
    def has_pull_request(self) -> bool:
        """Check if there is a pull request to comment on."""
        return self.pr_number is not None


class ManagedComment(BaseModel):
    """A pull request comment owned by this tool."""

    comment_id: int
    body: str
    created_at: datetime | None = None
    marker: str = ""
