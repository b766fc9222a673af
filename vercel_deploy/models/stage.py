"""Pipeline stage data models."""

from enum import Enum

from pydantic import BaseModel


class StageName(str, Enum):
    """Stages of a pipeline run, in execution order."""

    INSTALL = "install"
    PREBUILD = "prebuild"
    PULL = "pull"
    BUILD = "build"
    PREDEPLOY = "predeploy"
    DEPLOY = "deploy"
    ALIAS = "alias"


class PipelineState(str, Enum):
    """States of the pipeline state machine."""

    INIT = "init"
    INSTALLING = "installing"
    PREBUILDING = "prebuilding"
    PULLING = "pulling"
    BUILDING = "building"
    PREDEPLOYING = "predeploying"
    DEPLOYING = "deploying"
    ALIASING = "aliasing"
    DONE = "done"
    FAILED = "failed"


STAGE_STATES: dict[StageName, PipelineState] = {
    StageName.INSTALL: PipelineState.INSTALLING,
    StageName.PREBUILD: PipelineState.PREBUILDING,
    StageName.PULL: PipelineState.PULLING,
    StageName.BUILD: PipelineState.BUILDING,
    StageName.PREDEPLOY: PipelineState.PREDEPLOYING,
    StageName.DEPLOY: PipelineState.DEPLOYING,
    StageName.ALIAS: PipelineState.ALIASING,
}


class StageResult(BaseModel):
    """Outcome of a single external command."""

    stage: StageName
    command: str
    exit_code: int | None = None
    stdout: str = ""
    stderr: str = ""
    duration_ms: int = 0
    timed_out: bool = False

    @property
    def succeeded(self) -> bool:
        """Check if the command exited cleanly."""
        return self.exit_code == 0 and not self.timed_out

    @property
    def output(self) -> str:
        """Diagnostic-oriented output: stderr, falling back to stdout."""
        return self.stderr.strip() or self.stdout.strip()
