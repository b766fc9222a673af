"""Configuration Resolver.

Turns raw run parameters into a validated ExecutionPlan.
"""

import shlex
from pathlib import Path
from typing import Any, Mapping

from pydantic import ValidationError

from vercel_deploy.core.exceptions import InvalidConfiguration
from vercel_deploy.models.plan import (
    DEFAULT_ALIAS_DOMAIN,
    DEFAULT_NODE_VERSION,
    DEFAULT_STAGE_TIMEOUT,
    DEFAULT_VERCEL_CLI,
    Environment,
    ExecutionPlan,
    PackageManager,
)

REQUIRED_FIELDS = ("vercel_token", "vercel_org_id", "vercel_project_id")


def _text(params: Mapping[str, Any], key: str) -> str | None:
    """Read a parameter, treating blank strings as unset."""
    value = params.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _choice(params: Mapping[str, Any], key: str, enum_cls, default):
    value = _text(params, key)
    if value is None:
        return default
    try:
        return enum_cls(value.lower())
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidConfiguration(key, f"'{value}' is not one of: {allowed}")


def _working_directory(params: Mapping[str, Any], repo_root: Path) -> Path:
    root = repo_root.resolve()
    value = _text(params, "working_directory")
    if value is None:
        return root

    path = Path(value)
    if not path.is_absolute():
        path = root / path
    path = path.resolve()

    if not path.is_relative_to(root):
        raise InvalidConfiguration(
            "working_directory", f"'{value}' is outside the repository root"
        )
    if not path.is_dir():
        raise InvalidConfiguration(
            "working_directory", f"'{value}' does not exist in the repository"
        )
    return path


def _stage_timeout(params: Mapping[str, Any]) -> int:
    value = _text(params, "stage_timeout")
    if value is None:
        return DEFAULT_STAGE_TIMEOUT
    try:
        timeout = int(value)
    except ValueError:
        raise InvalidConfiguration("stage_timeout", f"'{value}' is not an integer")
    if timeout <= 0:
        raise InvalidConfiguration("stage_timeout", "must be a positive number of seconds")
    return timeout


def _vercel_cli(params: Mapping[str, Any]) -> str:
    value = _text(params, "vercel_cli")
    if value is None:
        return DEFAULT_VERCEL_CLI
    try:
        argv = shlex.split(value)
    except ValueError as e:
        raise InvalidConfiguration("vercel_cli", f"'{value}' cannot be parsed: {e}") from e
    if not argv or not argv[0]:
        raise InvalidConfiguration("vercel_cli", "does not name a program")
    return value


def resolve_plan(params: Mapping[str, Any], repo_root: Path) -> ExecutionPlan:
    """Validate run parameters and build the execution plan.

    Args:
        params: Raw key/value run parameters (blank values count as unset)
        repo_root: Root of the checked-out repository

    Returns:
        The immutable plan for this run

    Raises:
        InvalidConfiguration: Naming the first offending field
    """
    for field in REQUIRED_FIELDS:
        if _text(params, field) is None:
            raise InvalidConfiguration(field, "is required")

    environment = _choice(params, "environment", Environment, Environment.PREVIEW)
    package_manager = _choice(
        params, "package_manager", PackageManager, PackageManager.BUN
    )
    working_directory = _working_directory(params, repo_root)

    project_name = _text(params, "project_name") or repo_root.resolve().name
    if not project_name:
        raise InvalidConfiguration("project_name", "could not be determined")

    try:
        return ExecutionPlan(
            vercel_token=_text(params, "vercel_token"),
            org_id=_text(params, "vercel_org_id"),
            project_id=_text(params, "vercel_project_id"),
            project_name=project_name,
            environment=environment,
            package_manager=package_manager,
            working_directory=working_directory,
            node_version=_text(params, "node_version") or DEFAULT_NODE_VERSION,
            prebuild_script=_text(params, "prebuild_script"),
            predeploy_script=_text(params, "predeploy_script"),
            install_command=_text(params, "install_command"),
            alias_prefix=_text(params, "alias_prefix"),
            alias_domain=_text(params, "alias_domain") or DEFAULT_ALIAS_DOMAIN,
            vercel_cli=_vercel_cli(params),
            stage_timeout=_stage_timeout(params),
        )
    except ValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "plan"
        raise InvalidConfiguration(field, error["msg"]) from e
