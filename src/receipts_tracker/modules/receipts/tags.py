from __future__ import annotations

import re

# ASCII whitespace only; other Unicode spaces stay inside a tag.
TAG_SEPARATOR_RE = re.compile(r"[\t\n\f\r ]+")


def normalize_tags(raw: str | None) -> list[str]:
    """Split a freeform tag string into unique tokens, keeping first-seen order."""
    seen: set[str] = set()
    out: list[str] = []
    for token in TAG_SEPARATOR_RE.split(raw or ""):
        if not token or token in seen:
            continue
        seen.add(token)
        out.append(token)
    return out
