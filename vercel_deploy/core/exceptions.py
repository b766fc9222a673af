"""Custom exceptions for the deploy pipeline."""

from typing import Any

from vercel_deploy.models.stage import StageName, StageResult


class DeployPipelineError(Exception):
    """Base exception for the deploy pipeline."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class InvalidConfiguration(DeployPipelineError):
    """A run parameter is missing or has an unsupported value."""

    def __init__(self, field: str, reason: str):
        super().__init__(
            f"Invalid configuration for '{field}': {reason}",
            {"field": field},
        )
        self.field = field
        self.reason = reason


class LaunchFailure(DeployPipelineError):
    """A stage's process could not be started."""

    def __init__(self, stage: StageName, command: str, reason: str):
        super().__init__(
            f"Could not launch {stage.value} command '{command}': {reason}",
            {"stage": stage.value, "command": command},
        )
        self.stage = stage
        self.command = command
        self.reason = reason


class StageFailure(DeployPipelineError):
    """A stage exited with a non-zero status."""

    def __init__(self, result: StageResult, message: str | None = None):
        super().__init__(
            message
            or f"Stage '{result.stage.value}' exited with code {result.exit_code}",
            {"stage": result.stage.value, "exit_code": result.exit_code},
        )
        self.result = result
        self.stage = result.stage


class StageTimeout(StageFailure):
    """A stage exceeded its time limit and was killed."""

    def __init__(self, result: StageResult, timeout: float):
        super().__init__(
            result,
            f"Stage '{result.stage.value}' timed out after {timeout:g} seconds",
        )
        self.timeout = timeout


class URLParseFailure(DeployPipelineError):
    """The deploy command succeeded but printed no deployment URL."""

    def __init__(self, last_line: str):
        super().__init__(
            "Deploy command exited cleanly but its output did not end with a deployment URL",
            {"last_line": last_line},
        )
        self.last_line = last_line


class AliasBindingFailure(DeployPipelineError):
    """The platform refused to bind the alias after all retries."""

    def __init__(self, alias: str, attempts: int, reason: str):
        super().__init__(
            f"Could not bind alias '{alias}' after {attempts} attempt(s): {reason}",
            {"alias": alias, "attempts": attempts},
        )
        self.alias = alias
        self.attempts = attempts


class CommentReconcileFailure(DeployPipelineError):
    """The pull request status comment could not be listed, created or updated."""

    def __init__(self, pr_number: int | None, reason: str):
        target = f" on PR #{pr_number}" if pr_number is not None else ""
        super().__init__(
            f"Could not update status comment{target}: {reason}",
            {"pr_number": pr_number},
        )
        self.pr_number = pr_number
