"""Command Runner.

Runs a single external command for a pipeline stage and captures its
output and exit code.
"""

import asyncio
import os
import shlex
import signal
import time
from pathlib import Path
from typing import Mapping, Protocol, Sequence

from vercel_deploy.core.exceptions import LaunchFailure, StageTimeout
from vercel_deploy.models.stage import StageName, StageResult
from vercel_deploy.utils.logging import get_logger
from vercel_deploy.utils.text import mask_secrets

Command = str | Sequence[str]


class CommandRunner(Protocol):
    """Anything that can run a stage command and report a StageResult."""

    async def run(
        self,
        stage: StageName,
        command: Command,
        cwd: Path,
        env_overrides: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> StageResult:
        ...


def display_command(command: Command, secrets: Sequence[str] = ()) -> str:
    """Render a command for logs and results with secrets masked."""
    text = command if isinstance(command, str) else shlex.join(command)
    return mask_secrets(text, secrets)


class SubprocessRunner:
    """Runs commands as local child processes.

    Text commands (user scripts, install overrides) go through the shell;
    argv lists are executed directly.
    """

    def __init__(self, redact: Sequence[str] = ()):
        self.redact = [secret for secret in redact if secret]
        self.logger = get_logger("runner")

    async def run(
        self,
        stage: StageName,
        command: Command,
        cwd: Path,
        env_overrides: Mapping[str, str] | None = None,
        timeout: float | None = None,
    ) -> StageResult:
        """Run ``command`` to completion.

        A non-zero exit is returned as a normal result.

        Raises:
            LaunchFailure: If the process could not be started
            StageTimeout: If the process outlived ``timeout`` seconds
        """
        shown = display_command(command, self.redact)
        env = os.environ.copy()
        if env_overrides:
            env.update(env_overrides)

        self.logger.info(
            "runner.command.started",
            stage=stage.value,
            cmd=shown,
            cwd=str(cwd),
        )

        start_time = time.monotonic()
        try:
            if isinstance(command, str):
                process = await asyncio.create_subprocess_shell(
                    command,
                    cwd=str(cwd),
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    start_new_session=True,
                    env=env,
                )
            else:
                process = await asyncio.create_subprocess_exec(
                    *command,
                    cwd=str(cwd),
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                    start_new_session=True,
                    env=env,
                )
        except OSError as e:
            self.logger.error(
                "runner.command.launch_failed",
                stage=stage.value,
                cmd=shown,
                error=str(e),
            )
            raise LaunchFailure(stage, shown, str(e)) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(),
                timeout=timeout,
            )
        except asyncio.TimeoutError:
            # Kill the whole session so grandchildren release the pipes
            try:
                os.killpg(process.pid, signal.SIGKILL)
            except ProcessLookupError:
                pass
            await process.wait()
            result = StageResult(
                stage=stage,
                command=shown,
                exit_code=process.returncode,
                duration_ms=int((time.monotonic() - start_time) * 1000),
                timed_out=True,
            )
            self.logger.error(
                "runner.command.timed_out",
                stage=stage.value,
                timeout=timeout,
            )
            raise StageTimeout(result, timeout)

        result = StageResult(
            stage=stage,
            command=shown,
            exit_code=process.returncode,
            stdout=mask_secrets(stdout.decode(errors="replace") if stdout else "", self.redact),
            stderr=mask_secrets(stderr.decode(errors="replace") if stderr else "", self.redact),
            duration_ms=int((time.monotonic() - start_time) * 1000),
        )

        self.logger.info(
            "runner.command.finished",
            stage=stage.value,
            returncode=result.exit_code,
            stdout_len=len(result.stdout),
            stderr_len=len(result.stderr),
            duration_ms=result.duration_ms,
        )
        return result
