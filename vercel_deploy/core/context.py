"""Pull request context from the GitHub Actions event payload."""

import json
from pathlib import Path
from typing import Any

from vercel_deploy.models.outcome import PRContext
from vercel_deploy.utils.logging import get_logger

logger = get_logger(__name__)


def _read_event(event_path: str | None) -> dict[str, Any]:
    if not event_path:
        return {}
    try:
        with open(Path(event_path), encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("context.event_unreadable", path=event_path, error=str(e))
        return {}
    return payload if isinstance(payload, dict) else {}


def load_pr_context(
    event_path: str | None,
    repository: str,
    event_name: str = "",
    head_ref: str = "",
    base_ref: str = "",
    ref_name: str = "",
    sha: str | None = None,
) -> PRContext:
    """Derive the PR context for this run.

    Pushes and other non-PR events yield a context without a PR number,
    which turns off commenting and aliasing.
    """
    payload = _read_event(event_path)
    pull_request = payload.get("pull_request") or {}

    pr_number = pull_request.get("number")
    if pr_number is None and event_name.startswith("pull_request"):
        pr_number = payload.get("number")

    head = pull_request.get("head") or {}
    base = pull_request.get("base") or {}

    context = PRContext(
        pr_number=int(pr_number) if pr_number is not None else None,
        repository=repository,
        head_ref=head.get("ref") or head_ref or ref_name,
        base_ref=base.get("ref") or base_ref,
        sha=head.get("sha") or sha,
    )
    logger.info(
        "context.loaded",
        event_name=event_name,
        pr_number=context.pr_number,
        head_ref=context.head_ref,
    )
    return context
