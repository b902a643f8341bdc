from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(slots=True)
class SectionNode:
    """One heading in a document outline, with the headings nested beneath it."""

    id: str
    title: str
    level: int
    parent_id: Optional[str] = None
    order: int = 0
    children: List["SectionNode"] = field(default_factory=list)

    def add_child(self, child: "SectionNode") -> None:
        """Attach a child node while keeping the outline consistent."""

        child.order = len(self.children)
        child.parent_id = self.id
        self.children.append(child)


__all__ = ["SectionNode"]
