"""Execution plan data models."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class Environment(str, Enum):
    """Deployment target environment."""

    PREVIEW = "preview"
    PRODUCTION = "production"


class PackageManager(str, Enum):
    """Supported JavaScript package managers."""

    BUN = "bun"
    NPM = "npm"
    PNPM = "pnpm"


DEFAULT_NODE_VERSION = "20"
DEFAULT_VERCEL_CLI = "npx --yes vercel"
DEFAULT_ALIAS_DOMAIN = "vercel.app"
DEFAULT_STAGE_TIMEOUT = 1800


class ExecutionPlan(BaseModel):
    """Validated, immutable description of a single pipeline run."""

    model_config = ConfigDict(frozen=True)

    # Identity
    vercel_token: str = Field(..., min_length=1, repr=False)
    org_id: str = Field(..., min_length=1)
    project_id: str = Field(..., min_length=1)
    project_name: str

    # Build settings
    environment: Environment = Environment.PREVIEW
    package_manager: PackageManager = PackageManager.BUN
    working_directory: Path
    node_version: str = DEFAULT_NODE_VERSION

    # Optional hooks
    prebuild_script: str | None = None
    predeploy_script: str | None = None
    install_command: str | None = None

    # Aliasing
    alias_prefix: str | None = None
    alias_domain: str = DEFAULT_ALIAS_DOMAIN

    # Execution
    vercel_cli: str = DEFAULT_VERCEL_CLI
    stage_timeout: int = Field(default=DEFAULT_STAGE_TIMEOUT, gt=0)

    @property
    def is_production(self) -> bool:
        """Check if this run targets production."""
        return self.environment == Environment.PRODUCTION
