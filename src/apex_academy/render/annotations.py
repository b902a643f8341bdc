from __future__ import annotations

import re
from typing import Dict, List

from apex_academy.models.document import Annotation

ANNOTATION_TYPES = ("info", "tip", "warning", "error", "exam-trap", "best-practice")

ANNOTATION_ICONS: Dict[str, str] = {
    "tip": "\U0001f4a1",
    "warning": "\u26a0\ufe0f",
    "error": "\U0001f480",
    "exam-trap": "\U0001f480",
    "info": "\u2139\ufe0f",
    "best-practice": "\u2705",
}

# `// @tip: ...`, `-- @warning: ...`, `# @info: ...` or `<!-- @exam-trap: ... -->`
_ANNOTATION_COMMENT = re.compile(
    r"(?://|--|#|<!--)\s*@(?P<type>info|tip|warning|error|exam[-_]trap|best[-_]practice)\s*:\s*"
    r"(?P<content>.*?)\s*(?:-->)?\s*$",
    re.IGNORECASE,
)


def parse_annotations(code: str) -> List[Annotation]:
    """Collect line annotations from comments in a code block. The code itself is left as is."""

    annotations: List[Annotation] = []
    for index, line in enumerate(code.split("\n")):
        match = _ANNOTATION_COMMENT.search(line)
        if not match or not match.group("content"):
            continue
        kind = match.group("type").lower().replace("_", "-")
        annotations.append(
            Annotation(
                line=index,
                type=kind,
                content=match.group("content"),
                icon=ANNOTATION_ICONS.get(kind, ANNOTATION_ICONS["info"]),
            )
        )
    return annotations


__all__ = ["ANNOTATION_ICONS", "ANNOTATION_TYPES", "parse_annotations"]
