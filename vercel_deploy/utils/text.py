"""Text helpers shared by the pipeline, comments and reports."""

import re
from typing import Iterable

_NON_ALNUM = re.compile(r"[^a-z0-9]+")

MASK = "***"


def slugify(value: str) -> str:
    """Lowercase and collapse runs of non-alphanumerics to a single dash."""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


def truncate_tail(text: str, limit: int) -> str:
    """Keep the last ``limit`` characters of ``text``.

    Build failures usually explain themselves at the end of the log, so
    the head is dropped and marked.
    """
    text = text.strip()
    if len(text) <= limit:
        return text
    marker = "...(truncated)\n"
    return marker + text[-(limit - len(marker)):]


def mask_secrets(text: str, secrets: Iterable[str]) -> str:
    """Replace every non-empty secret in ``text`` with a mask."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, MASK)
    return text
