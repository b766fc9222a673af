"""Alias Resolver.

Gives preview deployments a stable ``pr-<n>--<name>`` hostname.
"""

import asyncio
from typing import Awaitable, Callable

import tenacity

from vercel_deploy.core.exceptions import (
    AliasBindingFailure,
    LaunchFailure,
    StageFailure,
)
from vercel_deploy.core.runner import CommandRunner
from vercel_deploy.core.vercel import VercelCLI
from vercel_deploy.models.plan import ExecutionPlan
from vercel_deploy.models.stage import StageName, StageResult
from vercel_deploy.utils.logging import get_logger
from vercel_deploy.utils.text import slugify

# DNS label limit
MAX_ALIAS_LENGTH = 63

MAX_ALIAS_ATTEMPTS = 3
ALIAS_BACKOFF_SECONDS = 2.0


class _AttemptFailed(Exception):
    """One alias attempt failed; retried until attempts run out."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def compute_alias(
    pr_number: int, alias_prefix: str | None, project_name: str
) -> str:
    """Compute the alias label for a pull request deployment."""
    slug = slugify(alias_prefix or project_name)
    alias = f"pr-{pr_number}--{slug}" if slug else f"pr-{pr_number}"
    return alias[:MAX_ALIAS_LENGTH].rstrip("-")


class AliasResolver:
    """Binds computed aliases to deployments with bounded retries."""

    def __init__(
        self,
        runner: CommandRunner,
        max_attempts: int = MAX_ALIAS_ATTEMPTS,
        backoff: float | None = None,
        sleep: Callable[[float], Awaitable[None]] | None = None,
    ):
        self.runner = runner
        self.max_attempts = max_attempts
        self.backoff = ALIAS_BACKOFF_SECONDS if backoff is None else backoff
        self.sleep = sleep or asyncio.sleep
        self.logger = get_logger("alias")

    def host_for(self, plan: ExecutionPlan, pr_number: int) -> str:
        """Full hostname for a pull request alias."""
        alias = compute_alias(pr_number, plan.alias_prefix, plan.project_name)
        return f"{alias}.{plan.alias_domain}"

    async def bind(
        self,
        plan: ExecutionPlan,
        pr_number: int,
        deployment_url: str,
        results: list[StageResult] | None = None,
    ) -> str:
        """Bind the PR alias to ``deployment_url``.

        Args:
            plan: The run's execution plan
            pr_number: Pull request the alias is named after
            deployment_url: URL produced by the deploy stage
            results: Optional list collecting each attempt's StageResult

        Returns:
            The alias URL

        Raises:
            AliasBindingFailure: Once every attempt has failed
        """
        host = self.host_for(plan, pr_number)
        cli = VercelCLI(plan)
        command = cli.alias_set(deployment_url, host)
        attempt = 0

        async def attempt_bind() -> str:
            nonlocal attempt
            attempt += 1
            self.logger.info(
                "alias.binding",
                host=host,
                deployment_url=deployment_url,
                attempt=attempt,
                max_attempts=self.max_attempts,
            )
            try:
                result = await self.runner.run(
                    StageName.ALIAS,
                    command,
                    cwd=plan.working_directory,
                    env_overrides=cli.env_overrides,
                    timeout=plan.stage_timeout,
                )
            except StageFailure as e:
                if results is not None:
                    results.append(e.result)
                reason = e.message
            except LaunchFailure as e:
                reason = e.message
            else:
                if results is not None:
                    results.append(result)
                if result.succeeded:
                    self.logger.info("alias.bound", host=host, attempt=attempt)
                    return f"https://{host}"
                reason = result.output or f"exit code {result.exit_code}"

            self.logger.warning(
                "alias.attempt_failed",
                host=host,
                attempt=attempt,
                reason=reason[:500],
            )
            raise _AttemptFailed(reason)

        retrying = tenacity.AsyncRetrying(
            retry=tenacity.retry_if_exception_type(_AttemptFailed),
            wait=tenacity.wait_exponential(multiplier=self.backoff),
            stop=tenacity.stop_after_attempt(self.max_attempts),
            sleep=self.sleep,
            reraise=True,
        )
        try:
            return await retrying(attempt_bind)
        except _AttemptFailed as e:
            raise AliasBindingFailure(host, self.max_attempts, e.reason) from e
