"""Vercel CLI command construction.

Builds happen inside CI (``vercel build``) and the deploy step only
uploads the prebuilt output (``vercel deploy --prebuilt``).
"""

import re
import shlex

from vercel_deploy.models.plan import ExecutionPlan

_URL_LINE = re.compile(r"^https?://[^\s/$.?#][^\s]*$")
_INSPECT_URL = re.compile(r"Inspect:\s+(https://\S+)")


class VercelCLI:
    """Argument builder for the Vercel CLI scoped to one plan."""

    def __init__(self, plan: ExecutionPlan):
        self.plan = plan
        self.prefix = shlex.split(plan.vercel_cli)

    @property
    def env_overrides(self) -> dict[str, str]:
        """Environment that pins the CLI to the configured org and project."""
        return {
            "VERCEL_ORG_ID": self.plan.org_id,
            "VERCEL_PROJECT_ID": self.plan.project_id,
        }

    def _command(self, *args: str) -> list[str]:
        return [*self.prefix, *args, f"--token={self.plan.vercel_token}"]

    def _target(self) -> list[str]:
        return ["--prod"] if self.plan.is_production else []

    def pull(self) -> list[str]:
        """Fetch project settings and env vars for the target environment."""
        return self._command(
            "pull",
            "--yes",
            f"--environment={self.plan.environment.value}",
        )

    def build(self) -> list[str]:
        """Build locally into ``.vercel/output``."""
        return self._command("build", *self._target())

    def deploy(self) -> list[str]:
        """Upload the prebuilt output without a remote rebuild."""
        return self._command("deploy", "--prebuilt", *self._target())

    def alias_set(self, deployment_url: str, host: str) -> list[str]:
        """Point ``host`` at an existing deployment."""
        return self._command(
            "alias",
            "set",
            deployment_url,
            host,
            f"--scope={self.plan.org_id}",
        )


def parse_deployment_url(stdout: str) -> str | None:
    """Return the deployment URL from deploy output.

    The CLI prints the URL as the last non-empty line of stdout; anything
    else there means the deploy cannot be trusted.
    """
    lines = [line.strip() for line in stdout.splitlines() if line.strip()]
    if not lines:
        return None
    last = lines[-1]
    return last if _URL_LINE.match(last) else None


def parse_inspect_url(stderr: str) -> str | None:
    """Extract the dashboard "Inspect" link the CLI prints on stderr."""
    match = _INSPECT_URL.search(stderr)
    return match.group(1) if match else None
