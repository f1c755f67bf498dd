from __future__ import annotations

import logging
from typing import Any, Callable

from .dom_tree import TreeAccessor
from .frames import resolve_frame_chain
from .models import CANDIDATE_TYPES, Candidate, CandidateType, GenerationContext, GenerationResult
from .optimized import optimized_candidates
from .oracle import LxmlOracle, UniquenessOracle
from .settings import EngineSettings
from .strategies import (
    absolute_candidates,
    attribute_candidates,
    class_candidates,
    identifier_candidates,
    position_candidates,
    text_candidates,
)

logger = logging.getLogger("xpathfinder.engine")

Generator = Callable[[GenerationContext], list[Candidate]]

SIMPLE_MODE_TYPES: tuple[CandidateType, ...] = ("Identifier", "Text", "Optimized")


def build_context(accessor: TreeAccessor, node: Any, settings: EngineSettings | None = None) -> GenerationContext:
    engine_settings = settings or EngineSettings()
    return GenerationContext(
        target=accessor.view(node),
        frame_chain=resolve_frame_chain(accessor, node, engine_settings.frame_placeholder),
        accessor=accessor,
        settings=engine_settings,
    )


def generate_candidates(
    accessor: TreeAccessor,
    node: Any,
    *,
    oracle: UniquenessOracle | None = None,
    settings: EngineSettings | None = None,
) -> GenerationResult:
    context = build_context(accessor, node, settings)
    uniqueness_oracle = oracle or LxmlOracle()

    generators: list[tuple[CandidateType, Generator]] = [
        ("Absolute", absolute_candidates),
        ("Identifier", identifier_candidates),
        ("Class", class_candidates),
        ("Attribute", attribute_candidates),
        ("Optimized", lambda ctx: optimized_candidates(ctx, uniqueness_oracle)),
        ("Text", text_candidates),
        ("Position", position_candidates),
    ]

    candidates: list[Candidate] = []
    for kind, generator in generators:
        produced = generator(context)
        logger.debug("%s strategy produced %s candidate(s) for <%s>.", kind, len(produced), context.target.tag)
        candidates.extend(produced)

    tag = context.target.tag
    if not candidates:
        logger.info("No XPath could be derived for <%s>.", tag)
        return GenerationResult(
            status="no_candidates",
            tag=tag,
            message=f"No XPath could be derived for the <{tag}> element. Try selecting another element.",
        )

    _log_candidate_type_breakdown(tag, candidates)
    return GenerationResult(status="ok", tag=tag, candidates=candidates)


def group_candidates(result: GenerationResult, *, simple: bool = True) -> dict[CandidateType, list[Candidate]]:
    grouped: dict[CandidateType, list[Candidate]] = {kind: [] for kind in CANDIDATE_TYPES}
    for candidate in result.candidates:
        grouped[candidate.type].append(candidate)

    if simple and any(grouped[kind] for kind in SIMPLE_MODE_TYPES):
        return {kind: grouped[kind] for kind in SIMPLE_MODE_TYPES if grouped[kind]}
    return {kind: items for kind, items in grouped.items() if items}


def _log_candidate_type_breakdown(tag: str, candidates: list[Candidate]) -> None:
    counts: dict[str, int] = {}
    for candidate in candidates:
        counts[candidate.type] = counts.get(candidate.type, 0) + 1
    summary = ", ".join(f"{kind}={count}" for kind, count in counts.items())
    logger.info("Generated %s candidate(s) for <%s>: %s", len(candidates), tag, summary)
