from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from .dom_tree import Document, TreeAccessor
    from .settings import EngineSettings

CandidateType = Literal["Absolute", "Identifier", "Class", "Attribute", "Text", "Position", "Optimized"]
ResultStatus = Literal["ok", "no_candidates"]

CANDIDATE_TYPES: tuple[CandidateType, ...] = (
    "Absolute",
    "Identifier",
    "Class",
    "Attribute",
    "Optimized",
    "Text",
    "Position",
)

FrameChain = tuple[str, ...]


@dataclass(slots=True)
class ElementNode:
    handle: Any
    tag: str
    identifier: str | None
    class_value: str | None
    classes: list[str]
    attributes: dict[str, str]
    direct_text: str
    text_chunks: list[str]
    aggregate_text: str
    label_text: str | None
    label_wraps: bool
    first_option_text: str | None
    parent: Any | None
    document: Document

    def attr(self, key: str) -> str | None:
        value = self.attributes.get(key)
        if value is None:
            return None
        return value or None


@dataclass(frozen=True, slots=True)
class Candidate:
    type: CandidateType
    expression: str
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"type": self.type, "expression": self.expression, "description": self.description}


@dataclass(slots=True)
class GenerationContext:
    target: ElementNode
    frame_chain: FrameChain
    accessor: TreeAccessor
    settings: EngineSettings

    def prefixed(self, expression: str) -> str:
        if not self.frame_chain:
            return expression
        return "".join(self.frame_chain) + expression


@dataclass(slots=True)
class GenerationResult:
    status: ResultStatus
    tag: str
    candidates: list[Candidate] = field(default_factory=list)
    message: str = ""

    @property
    def count(self) -> int:
        return len(self.candidates)

    def to_records(self) -> list[dict[str, str]]:
        return [candidate.to_dict() for candidate in self.candidates]
