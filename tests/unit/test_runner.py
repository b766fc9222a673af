"""Unit tests for the subprocess command runner."""

import sys
import time
from pathlib import Path

import pytest

from vercel_deploy.core.exceptions import LaunchFailure, StageTimeout
from vercel_deploy.core.runner import SubprocessRunner, display_command
from vercel_deploy.models.stage import StageName


class TestSubprocessRunner:
    """Tests for SubprocessRunner."""

    @pytest.fixture
    def runner(self) -> SubprocessRunner:
        return SubprocessRunner(redact=["tok_secret"])

    @pytest.mark.asyncio
    async def test_captures_output(self, runner: SubprocessRunner, tmp_path: Path):
        """Test stdout and stderr are captured separately."""
        result = await runner.run(
            StageName.PREBUILD,
            "echo out && echo err 1>&2",
            cwd=tmp_path,
        )

        assert result.exit_code == 0
        assert result.succeeded
        assert result.stdout.strip() == "out"
        assert result.stderr.strip() == "err"
        assert result.stage == StageName.PREBUILD

    @pytest.mark.asyncio
    async def test_nonzero_exit_is_a_result(self, runner: SubprocessRunner, tmp_path: Path):
        """Test a failing command does not raise."""
        result = await runner.run(StageName.INSTALL, "exit 7", cwd=tmp_path)

        assert result.exit_code == 7
        assert not result.succeeded

    @pytest.mark.asyncio
    async def test_working_directory(self, runner: SubprocessRunner, tmp_path: Path):
        (tmp_path / "marker.txt").write_text("here")

        result = await runner.run(StageName.PREBUILD, "cat marker.txt", cwd=tmp_path)

        assert result.stdout == "here"

    @pytest.mark.asyncio
    async def test_env_overrides(self, runner: SubprocessRunner, tmp_path: Path):
        """Test overrides are merged over the ambient environment."""
        result = await runner.run(
            StageName.PULL,
            [sys.executable, "-c", "import os; print(os.environ['VERCEL_ORG_ID'], 'PATH' in os.environ)"],
            cwd=tmp_path,
            env_overrides={"VERCEL_ORG_ID": "team_123"},
        )

        assert result.stdout.strip() == "team_123 True"

    @pytest.mark.asyncio
    async def test_missing_binary(self, runner: SubprocessRunner, tmp_path: Path):
        """Test an argv command that cannot start raises LaunchFailure."""
        with pytest.raises(LaunchFailure) as exc_info:
            await runner.run(StageName.INSTALL, ["definitely-not-a-real-binary-xyz"], cwd=tmp_path)

        assert exc_info.value.stage == StageName.INSTALL

    @pytest.mark.asyncio
    async def test_timeout(self, runner: SubprocessRunner, tmp_path: Path):
        """Test a hung command is killed and reported as a timeout."""
        with pytest.raises(StageTimeout) as exc_info:
            await runner.run(StageName.BUILD, "sleep 5", cwd=tmp_path, timeout=0.2)

        assert exc_info.value.result.timed_out is True
        assert exc_info.value.stage == StageName.BUILD

    @pytest.mark.asyncio
    async def test_timeout_kills_grandchildren(self, runner: SubprocessRunner, tmp_path: Path):
        """Test a timeout is enforced when the shell forks a long-running child."""
        start = time.monotonic()

        with pytest.raises(StageTimeout):
            await runner.run(StageName.BUILD, "sleep 6; true", cwd=tmp_path, timeout=0.5)

        assert time.monotonic() - start < 3

    @pytest.mark.asyncio
    async def test_timeout_kills_exec_descendants(self, runner: SubprocessRunner, tmp_path: Path):
        """Test argv commands that spawn children are bounded too."""
        start = time.monotonic()

        with pytest.raises(StageTimeout):
            await runner.run(
                StageName.DEPLOY,
                ["sh", "-c", "sleep 6 & wait"],
                cwd=tmp_path,
                timeout=0.5,
            )

        assert time.monotonic() - start < 3

    @pytest.mark.asyncio
    async def test_secrets_masked(self, runner: SubprocessRunner, tmp_path: Path):
        """Test the token is masked in the command and captured output."""
        result = await runner.run(StageName.DEPLOY, ["echo", "--token=tok_secret"], cwd=tmp_path)

        assert "tok_secret" not in result.command
        assert "tok_secret" not in result.stdout
        assert "--token=***" in result.stdout


def test_display_command():
    assert display_command(["vercel", "deploy", "--token=abc"], ["abc"]) == "vercel deploy --token=***"
    assert display_command("npm ci", []) == "npm ci"
