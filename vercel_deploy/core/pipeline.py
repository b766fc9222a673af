"""Pipeline Engine.

Sequences the install, script, build and deploy stages of a run and
reduces them to a single DeploymentOutcome.

Pipeline states:
    init -> installing -> prebuilding -> pulling -> building
         -> predeploying -> deploying -> aliasing -> done | failed

A stage that does not apply to the plan is skipped. The first stage that
fails moves the pipeline to ``failed`` and nothing after it runs.
"""

from dataclasses import dataclass
from typing import Callable

from vercel_deploy.core.alias import AliasResolver
from vercel_deploy.core.exceptions import (
    AliasBindingFailure,
    DeployPipelineError,
    LaunchFailure,
    StageFailure,
    StageTimeout,
    URLParseFailure,
)
from vercel_deploy.core.runner import Command, CommandRunner
from vercel_deploy.core.vercel import VercelCLI, parse_deployment_url, parse_inspect_url
from vercel_deploy.models.outcome import DeploymentOutcome, PRContext
from vercel_deploy.models.plan import Environment, ExecutionPlan, PackageManager
from vercel_deploy.models.stage import (
    STAGE_STATES,
    PipelineState,
    StageName,
    StageResult,
)
from vercel_deploy.utils.logging import get_logger
from vercel_deploy.utils.text import truncate_tail

# Upper bound on diagnostics carried in the outcome
MAX_DIAGNOSTIC_CHARS = 4000

INSTALL_COMMANDS: dict[PackageManager, list[str]] = {
    PackageManager.BUN: ["bun", "install"],
    PackageManager.NPM: ["npm", "install"],
    PackageManager.PNPM: ["pnpm", "install"],
}


def install_command_for(plan: ExecutionPlan) -> Command:
    """Explicit install command if configured, else the package manager's."""
    if plan.install_command:
        return plan.install_command
    return list(INSTALL_COMMANDS[plan.package_manager])


@dataclass(frozen=True)
class Stage:
    """A pipeline stage and the predicate deciding whether it runs."""

    name: StageName
    applies: Callable[[ExecutionPlan], bool]
    command: Callable[[ExecutionPlan], Command]
    platform: bool = False


def _always(plan: ExecutionPlan) -> bool:
    return True


DEFAULT_STAGES: tuple[Stage, ...] = (
    Stage(StageName.INSTALL, _always, install_command_for),
    Stage(
        StageName.PREBUILD,
        lambda plan: bool(plan.prebuild_script),
        lambda plan: plan.prebuild_script,
    ),
    Stage(StageName.PULL, _always, lambda plan: VercelCLI(plan).pull(), platform=True),
    Stage(StageName.BUILD, _always, lambda plan: VercelCLI(plan).build(), platform=True),
    Stage(
        StageName.PREDEPLOY,
        lambda plan: bool(plan.predeploy_script),
        lambda plan: plan.predeploy_script,
    ),
    Stage(StageName.DEPLOY, _always, lambda plan: VercelCLI(plan).deploy(), platform=True),
)


def should_alias(plan: ExecutionPlan, pr_context: PRContext) -> bool:
    """Preview runs for a pull request get a PR alias; nothing else does."""
    return plan.environment == Environment.PREVIEW and pr_context.has_pull_request


class PipelineEngine:
    """Runs the stages of one pipeline run in order.

    The engine never raises for stage problems; every failure is folded
    into the returned DeploymentOutcome.
    """

    def __init__(
        self,
        runner: CommandRunner,
        alias_resolver: AliasResolver | None = None,
    ):
        self.runner = runner
        self.alias_resolver = alias_resolver or AliasResolver(runner)
        self.stages = DEFAULT_STAGES
        self.state = PipelineState.INIT
        self.history: list[PipelineState] = [PipelineState.INIT]
        self.logger = get_logger("pipeline")

    def _transition(self, state: PipelineState) -> None:
        self.logger.debug("pipeline.transition", source=self.state.value, target=state.value)
        self.state = state
        self.history.append(state)

    def _fail(
        self,
        plan: ExecutionPlan,
        stage: StageName,
        error: DeployPipelineError,
        results: list[StageResult],
        output: str = "",
    ) -> DeploymentOutcome:
        self._transition(PipelineState.FAILED)
        diagnostic = error.message
        if output:
            diagnostic = f"{diagnostic}\n\n{output}"

        self.logger.error(
            "pipeline.failed",
            stage=stage.value,
            error_kind=type(error).__name__,
            error=error.message,
        )
        return DeploymentOutcome(
            success=False,
            environment=plan.environment,
            failing_stage=stage,
            error_kind=type(error).__name__,
            diagnostic=truncate_tail(diagnostic, MAX_DIAGNOSTIC_CHARS),
            stages=results,
        )

    async def run(self, plan: ExecutionPlan, pr_context: PRContext) -> DeploymentOutcome:
        """Execute the pipeline for ``plan``.

        Args:
            plan: The resolved execution plan
            pr_context: Pull request context for aliasing

        Returns:
            Exactly one outcome describing the run
        """
        self.state = PipelineState.INIT
        self.history = [PipelineState.INIT]
        results: list[StageResult] = []
        cli = VercelCLI(plan)

        self.logger.info(
            "pipeline.started",
            project=plan.project_name,
            environment=plan.environment.value,
            package_manager=plan.package_manager.value,
            cwd=str(plan.working_directory),
        )

        for stage in self.stages:
            if not stage.applies(plan):
                self.logger.info("pipeline.stage.skipped", stage=stage.name.value)
                continue

            self._transition(STAGE_STATES[stage.name])
            self.logger.info("pipeline.stage.started", stage=stage.name.value)

            try:
                result = await self.runner.run(
                    stage.name,
                    stage.command(plan),
                    cwd=plan.working_directory,
                    env_overrides=cli.env_overrides if stage.platform else None,
                    timeout=plan.stage_timeout,
                )
            except StageTimeout as e:
                results.append(e.result)
                return self._fail(plan, stage.name, e, results, e.result.output)
            except LaunchFailure as e:
                return self._fail(plan, stage.name, e, results)

            results.append(result)
            if not result.succeeded:
                return self._fail(
                    plan, stage.name, StageFailure(result), results, result.output
                )

            self.logger.info(
                "pipeline.stage.completed",
                stage=stage.name.value,
                duration_ms=result.duration_ms,
            )

        # Deploy is the last stage and always applies
        deploy_result = results[-1]
        deployment_url = parse_deployment_url(deploy_result.stdout)
        if deployment_url is None:
            lines = deploy_result.stdout.strip().splitlines()
            return self._fail(
                plan,
                StageName.DEPLOY,
                URLParseFailure(lines[-1] if lines else ""),
                results,
                deploy_result.output,
            )

        outcome = DeploymentOutcome(
            success=True,
            environment=plan.environment,
            deployment_url=deployment_url,
            inspect_url=parse_inspect_url(deploy_result.stderr),
            stages=results,
        )
        self.logger.info("pipeline.deployed", url=deployment_url)

        if should_alias(plan, pr_context):
            self._transition(PipelineState.ALIASING)
            try:
                outcome.alias_url = await self.alias_resolver.bind(
                    plan, pr_context.pr_number, deployment_url, results
                )
            except AliasBindingFailure as e:
                self.logger.warning("pipeline.alias_failed", error=e.message)
                outcome.alias_error = e.message
        else:
            self.logger.info("pipeline.stage.skipped", stage=StageName.ALIAS.value)

        self._transition(PipelineState.DONE)
        self.logger.info(
            "pipeline.completed",
            url=outcome.deployment_url,
            alias_url=outcome.alias_url,
        )
        return outcome
