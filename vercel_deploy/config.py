"""Run configuration using pydantic-settings."""

from functools import lru_cache
from typing import Any, Literal

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load .env file without clobbering what the CI runner already exported
load_dotenv(override=False)


class Settings(BaseSettings):
    """Run settings loaded from environment variables.

    Values are kept as raw strings; the configuration resolver owns
    validation so that a bad value is reported by field name.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Vercel identity
    vercel_token: str = Field(default="", repr=False)
    vercel_org_id: str = ""
    vercel_project_id: str = ""
    project_name: str | None = None

    # Build settings
    deploy_environment: str | None = None
    package_manager: str | None = None
    node_version: str | None = None
    working_directory: str | None = None
    install_command: str | None = None
    prebuild_script: str | None = None
    predeploy_script: str | None = None

    # Aliasing
    alias_prefix: str | None = None
    alias_domain: str | None = None

    # Execution
    vercel_cli: str | None = None
    stage_timeout: str | None = None

    # GitHub
    github_token: str = Field(default="", repr=False)
    github_api_url: str = "https://api.github.com"
    github_repository: str = ""
    github_workspace: str | None = None
    github_event_name: str = ""
    github_event_path: str | None = None
    github_head_ref: str = ""
    github_base_ref: str = ""
    github_ref_name: str = ""
    github_sha: str | None = None
    github_output: str | None = None
    github_step_summary: str | None = None

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_file: str | None = None

    @property
    def repository_name(self) -> str:
        """Repository name without the owner prefix."""
        return self.github_repository.rsplit("/", 1)[-1]

    def run_parameters(self) -> dict[str, Any]:
        """Raw run parameters handed to the configuration resolver."""
        return {
            "vercel_token": self.vercel_token,
            "vercel_org_id": self.vercel_org_id,
            "vercel_project_id": self.vercel_project_id,
            "project_name": self.project_name or self.repository_name,
            "environment": self.deploy_environment,
            "package_manager": self.package_manager,
            "node_version": self.node_version,
            "working_directory": self.working_directory,
            "install_command": self.install_command,
            "prebuild_script": self.prebuild_script,
            "predeploy_script": self.predeploy_script,
            "alias_prefix": self.alias_prefix,
            "alias_domain": self.alias_domain,
            "vercel_cli": self.vercel_cli,
            "stage_timeout": self.stage_timeout,
        }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
