"""Pytest configuration and fixtures."""

from datetime import datetime, timedelta
from pathlib import Path
from typing import Any, Callable, Mapping

import pytest

from vercel_deploy.core.resolver import resolve_plan
from vercel_deploy.models.outcome import ManagedComment
from vercel_deploy.models.plan import ExecutionPlan
from vercel_deploy.models.stage import StageName, StageResult

DEPLOY_URL = "https://foo-bar.vercel.app"
DEPLOY_STDOUT = f"Vercel CLI 39.1.0\nUploading prebuilt output...\n{DEPLOY_URL}\n"
DEPLOY_STDERR = "Inspect: https://vercel.com/acme/foo-bar/AbC123 [2s]\n"


class FakeRunner:
    """CommandRunner returning scripted results per stage.

    A script entry may be a StageResult field dict, an exception instance,
    or a list of either consumed one call at a time.
    """

    def __init__(self, script: Mapping[StageName, Any] | None = None):
        self.script = dict(script or {})
        self.calls: list[dict[str, Any]] = []

    @property
    def stages_run(self) -> list[StageName]:
        return [call["stage"] for call in self.calls]

    def commands_for(self, stage: StageName) -> list[Any]:
        return [call["command"] for call in self.calls if call["stage"] == stage]

    async def run(self, stage, command, cwd, env_overrides=None, timeout=None):
        self.calls.append(
            {
                "stage": stage,
                "command": command,
                "cwd": cwd,
                "env": dict(env_overrides or {}),
                "timeout": timeout,
            }
        )
        entry = self.script.get(stage)
        if isinstance(entry, list):
            entry = entry.pop(0) if entry else None
        if isinstance(entry, Exception):
            raise entry
        fields = {"exit_code": 0}
        if stage == StageName.DEPLOY and entry is None:
            fields.update(stdout=DEPLOY_STDOUT, stderr=DEPLOY_STDERR)
        fields.update(entry or {})
        shown = command if isinstance(command, str) else " ".join(command)
        return StageResult(stage=stage, command=shown, **fields)


class FakeCommentChannel:
    """In-memory stand-in for a pull request's comment thread."""

    def __init__(self):
        self.comments: dict[int, dict[int, ManagedComment]] = {}
        self._next_id = 1000
        self._clock = datetime(2026, 1, 1, 12, 0, 0)
        self.created: list[int] = []
        self.updated: list[int] = []

    def add(self, pr_number: int, body: str) -> ManagedComment:
        """Seed a comment as if some earlier run or tool posted it."""
        self._next_id += 1
        self._clock += timedelta(minutes=1)
        comment = ManagedComment(
            comment_id=self._next_id, body=body, created_at=self._clock
        )
        self.comments.setdefault(pr_number, {})[comment.comment_id] = comment
        return comment

    def all_for(self, pr_number: int) -> list[ManagedComment]:
        return list(self.comments.get(pr_number, {}).values())

    def list_comments(self, pr_number: int) -> list[ManagedComment]:
        return [comment.model_copy() for comment in self.all_for(pr_number)]

    def create_comment(self, pr_number: int, body: str) -> ManagedComment:
        comment = self.add(pr_number, body)
        self.created.append(comment.comment_id)
        return comment.model_copy()

    def update_comment(self, comment_id: int, body: str) -> ManagedComment:
        for thread in self.comments.values():
            if comment_id in thread:
                thread[comment_id].body = body
                self.updated.append(comment_id)
                return thread[comment_id].model_copy()
        raise KeyError(comment_id)


@pytest.fixture
def repo_root(tmp_path: Path) -> Path:
    """A checked-out repository with a nested web app."""
    root = tmp_path / "dashboard-repo"
    (root / "apps" / "web").mkdir(parents=True)
    (root / "package.json").write_text('{"name": "dashboard"}')
    return root


@pytest.fixture
def base_params() -> dict[str, Any]:
    """Minimal valid run parameters."""
    return {
        "vercel_token": "tok_secret",
        "vercel_org_id": "team_123",
        "vercel_project_id": "prj_456",
        "project_name": "Dashboard App",
    }


@pytest.fixture
def make_plan(repo_root: Path, base_params: dict[str, Any]) -> Callable[..., ExecutionPlan]:
    """Build a plan from the base parameters plus overrides."""

    def _make(**overrides: Any) -> ExecutionPlan:
        return resolve_plan({**base_params, **overrides}, repo_root)

    return _make


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def channel() -> FakeCommentChannel:
    return FakeCommentChannel()
