"""Result Reporter.

Publishes the run's outputs and a Markdown summary to the invoking job.
"""

import uuid
from pathlib import Path
from typing import Protocol

from vercel_deploy.models.outcome import DeploymentOutcome, PRContext
from vercel_deploy.utils.logging import get_logger

OUTPUT_NAMES = ("deployment_url", "alias_url", "pr_number")


class ReportSink(Protocol):
    """Where outputs and the summary are emitted."""

    def set_output(self, name: str, value: str) -> None:
        ...

    def write_summary(self, markdown: str) -> None:
        ...


class InMemorySink:
    """Collects outputs and summaries in memory."""

    def __init__(self):
        self.outputs: dict[str, str] = {}
        self.summaries: list[str] = []

    def set_output(self, name: str, value: str) -> None:
        self.outputs[name] = value

    def write_summary(self, markdown: str) -> None:
        self.summaries.append(markdown)


class GitHubActionsSink:
    """Appends to the files GitHub Actions exposes as GITHUB_OUTPUT and
    GITHUB_STEP_SUMMARY. Missing paths fall back to the log."""

    def __init__(self, output_path: str | None = None, summary_path: str | None = None):
        self.output_path = Path(output_path) if output_path else None
        self.summary_path = Path(summary_path) if summary_path else None
        self.logger = get_logger("reporter")

    def set_output(self, name: str, value: str) -> None:
        if self.output_path is None:
            self.logger.info("reporter.output", name=name, value=value)
            return
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4().hex}"
            entry = f"{name}<<{delimiter}\n{value}\n{delimiter}\n"
        else:
            entry = f"{name}={value}\n"
        with open(self.output_path, "a", encoding="utf-8") as f:
            f.write(entry)

    def write_summary(self, markdown: str) -> None:
        if self.summary_path is None:
            self.logger.info("reporter.summary", summary=markdown)
            return
        with open(self.summary_path, "a", encoding="utf-8") as f:
            f.write(markdown)


def build_outputs(
    outcome: DeploymentOutcome | None, pr_context: PRContext | None
) -> dict[str, str]:
    """Job outputs; absent values become empty strings."""
    return {
        "deployment_url": (outcome.deployment_url if outcome else None) or "",
        "alias_url": (outcome.alias_url if outcome else None) or "",
        "pr_number": (
            str(pr_context.pr_number)
            if pr_context and pr_context.pr_number is not None
            else ""
        ),
    }


def render_summary(
    outcome: DeploymentOutcome | None,
    pr_context: PRContext | None,
    comment_error: str | None = None,
    config_error: str | None = None,
) -> str:
    """Human-readable summary block for the job page."""
    lines = ["## Vercel deployment", ""]

    if outcome is None:
        lines.append(":x: **Configuration invalid**, nothing was run.")
        if config_error:
            lines += ["", f"> {config_error}"]
        return "\n".join(lines) + "\n"

    status = ":white_check_mark: Succeeded" if outcome.success else ":x: Failed"
    lines += [
        "| | |",
        "|---|---|",
        f"| **Status** | {status} |",
        f"| **Environment** | {outcome.environment.value} |",
    ]
    if outcome.deployment_url:
        lines.append(f"| **Deployment URL** | {outcome.deployment_url} |")
    if outcome.alias_url:
        lines.append(f"| **Alias URL** | {outcome.alias_url} |")
    if pr_context and pr_context.pr_number is not None:
        lines.append(f"| **Pull request** | #{pr_context.pr_number} |")
    if outcome.failing_stage:
        lines.append(f"| **Failing stage** | {outcome.failing_stage.value} |")

    if outcome.stages:
        lines += ["", "| Stage | Exit code | Duration |", "|---|---|---|"]
        for result in outcome.stages:
            exit_code = "timeout" if result.timed_out else str(result.exit_code)
            lines.append(
                f"| {result.stage.value} | {exit_code} | {result.duration_ms / 1000:.1f}s |"
            )

    if outcome.diagnostic:
        lines += ["", "<details><summary>Diagnostic</summary>", "", "```",
                  outcome.diagnostic.replace("```", "'''"), "```", "</details>"]
    if outcome.alias_error:
        lines += ["", f"> :warning: Alias binding failed: {outcome.alias_error}"]
    if comment_error:
        lines += ["", f"> :warning: Pull request comment not updated: {comment_error}"]

    return "\n".join(lines) + "\n"


def report(
    outcome: DeploymentOutcome | None,
    pr_context: PRContext | None,
    sink: ReportSink,
    comment_error: str | None = None,
    config_error: str | None = None,
) -> dict[str, str]:
    """Emit outputs and the summary to ``sink``."""
    outputs = build_outputs(outcome, pr_context)
    for name in OUTPUT_NAMES:
        sink.set_output(name, outputs[name])
    sink.write_summary(
        render_summary(outcome, pr_context, comment_error, config_error)
    )
    return outputs
