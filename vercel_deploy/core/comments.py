"""Comment Reconciler.

Keeps exactly one status comment per pull request. The comment is found
again on every run by a hidden marker in its body, so no state is stored
between runs.
"""

from typing import Protocol

from github import Auth, Github
from github.GithubException import GithubException

from vercel_deploy.core.exceptions import CommentReconcileFailure
from vercel_deploy.models.outcome import DeploymentOutcome, ManagedComment, PRContext
from vercel_deploy.utils.logging import get_logger
from vercel_deploy.utils.text import truncate_tail

COMMENT_MARKER = "<!-- vercel-deploy-pipeline:status -->"

# Keeps the comment well under GitHub's 65536 character body limit
MAX_COMMENT_DIAGNOSTIC_CHARS = 1500


class CommentChannel(Protocol):
    """Minimal comment CRUD capability for a pull request."""

    def list_comments(self, pr_number: int) -> list[ManagedComment]:
        ...

    def create_comment(self, pr_number: int, body: str) -> ManagedComment:
        ...

    def update_comment(self, comment_id: int, body: str) -> ManagedComment:
        ...


class GitHubCommentChannel:
    """CommentChannel backed by GitHub issue comments."""

    def __init__(self, token: str, repository: str, base_url: str = "https://api.github.com"):
        if not token:
            raise CommentReconcileFailure(None, "GITHUB_TOKEN is required to post comments")
        if not repository:
            raise CommentReconcileFailure(None, "GITHUB_REPOSITORY is not set")

        self.gh = Github(auth=Auth.Token(token), base_url=base_url)
        self.repository = repository
        self._repo = None

    @property
    def repo(self):
        if self._repo is None:
            self._repo = self.gh.get_repo(self.repository)
        return self._repo

    @staticmethod
    def _to_model(comment) -> ManagedComment:
        return ManagedComment(
            comment_id=comment.id,
            body=comment.body or "",
            created_at=comment.created_at,
        )

    def list_comments(self, pr_number: int) -> list[ManagedComment]:
        issue = self.repo.get_issue(pr_number)
        return [self._to_model(comment) for comment in issue.get_comments()]

    def create_comment(self, pr_number: int, body: str) -> ManagedComment:
        issue = self.repo.get_issue(pr_number)
        return self._to_model(issue.create_comment(body))

    def update_comment(self, comment_id: int, body: str) -> ManagedComment:
        comment = self.repo.get_issue_comment(comment_id)
        comment.edit(body)
        return ManagedComment(
            comment_id=comment_id,
            body=body,
            created_at=comment.created_at,
        )


def render_comment_body(
    outcome: DeploymentOutcome,
    pr_context: PRContext,
    marker: str = COMMENT_MARKER,
) -> str:
    """Render the full status comment for an outcome."""
    environment = outcome.environment.value.capitalize()
    lines = [marker]

    if outcome.success:
        lines += [
            f"### :white_check_mark: {environment} deployment ready",
            "",
            "| | |",
            "|---|---|",
            f"| **Deployment** | {outcome.deployment_url} |",
        ]
        if outcome.alias_url:
            lines.append(f"| **Alias** | {outcome.alias_url} |")
        if outcome.inspect_url:
            lines.append(f"| **Inspect** | {outcome.inspect_url} |")
        if pr_context.sha:
            lines.append(f"| **Commit** | `{pr_context.sha[:7]}` |")
        if outcome.alias_error:
            lines += ["", f"> :warning: Alias not assigned: {outcome.alias_error}"]
    else:
        stage = outcome.failing_stage.value if outcome.failing_stage else "unknown"
        lines += [
            f"### :x: {environment} deployment failed",
            "",
            f"The **{stage}** stage failed"
            + (f" ({outcome.error_kind})" if outcome.error_kind else "")
            + ".",
        ]
        if pr_context.sha:
            lines.append(f"Commit: `{pr_context.sha[:7]}`")
        if outcome.diagnostic:
            diagnostic = truncate_tail(outcome.diagnostic, MAX_COMMENT_DIAGNOSTIC_CHARS)
            lines += [
                "",
                "<details><summary>Diagnostic</summary>",
                "",
                "```",
                diagnostic.replace("```", "'''"),
                "```",
                "</details>",
            ]

    return "\n".join(lines) + "\n"


class CommentReconciler:
    """Creates or updates the single managed comment on a pull request."""

    def __init__(self, channel: CommentChannel, marker: str = COMMENT_MARKER):
        self.channel = channel
        self.marker = marker
        self.logger = get_logger("comments")

    def find_managed(self, comments: list[ManagedComment]) -> ManagedComment | None:
        """Pick the most recently created comment carrying the marker.

        Duplicates left behind by overlapping runs are not touched.
        """
        matches = [comment for comment in comments if self.marker in comment.body]
        if not matches:
            return None
        if len(matches) > 1:
            self.logger.warning(
                "comments.duplicates_found",
                count=len(matches),
                comment_ids=[comment.comment_id for comment in matches],
            )
        return max(
            matches,
            key=lambda comment: (
                comment.created_at.timestamp() if comment.created_at else 0.0,
                comment.comment_id,
            ),
        )

    def reconcile(
        self, pr_context: PRContext, outcome: DeploymentOutcome
    ) -> ManagedComment:
        """Bring the PR's status comment in line with ``outcome``.

        Raises:
            CommentReconcileFailure: If the channel could not be used
        """
        if pr_context.pr_number is None:
            raise CommentReconcileFailure(None, "no pull request in this run")

        pr_number = pr_context.pr_number
        body = render_comment_body(outcome, pr_context, self.marker)

        try:
            existing = self.find_managed(self.channel.list_comments(pr_number))
            if existing is not None:
                comment = self.channel.update_comment(existing.comment_id, body)
                self.logger.info(
                    "comments.updated",
                    pr_number=pr_number,
                    comment_id=existing.comment_id,
                )
            else:
                comment = self.channel.create_comment(pr_number, body)
                self.logger.info(
                    "comments.created",
                    pr_number=pr_number,
                    comment_id=comment.comment_id,
                )
        except GithubException as e:
            self.logger.error("comments.github_error", pr_number=pr_number, error=str(e))
            raise CommentReconcileFailure(pr_number, f"GitHub API error: {e}") from e
        except Exception as e:
            self.logger.exception("comments.unexpected_error", pr_number=pr_number)
            raise CommentReconcileFailure(pr_number, f"Unexpected error: {e}") from e

        comment.marker = self.marker
        return comment
