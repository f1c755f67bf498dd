from __future__ import annotations

import logging
from typing import Iterator

from .models import Candidate, GenerationContext
from .oracle import OracleEvaluationError, UniquenessOracle
from .strategies import contains_text_expression, exact_text_expression
from .xpath_format import is_xpath_name, xpath_literal

logger = logging.getLogger("xpathfinder.engine")

OPTIMIZED_SKIPPED_ATTRIBUTES = {"id", "class"}


def optimized_candidates(context: GenerationContext, oracle: UniquenessOracle) -> list[Candidate]:
    """Keep only the derived expressions that match exactly one node in the target's document.

    Expressions are evaluated without the frame prefix since the oracle scope
    is the document owning the target; survivors are emitted prefixed.
    """
    scope = context.target.document
    budget = context.settings.max_oracle_queries
    candidates: list[Candidate] = []
    seen: set[str] = set()
    queries = 0

    for expression, description in _optimized_drafts(context):
        if expression in seen:
            continue
        seen.add(expression)
        if queries >= budget:
            logger.info("Optimized generation stopped after %s oracle queries.", budget)
            break
        queries += 1

        try:
            matches = oracle.count(expression, scope)
        except OracleEvaluationError as exc:
            logger.debug("Dropping optimized candidate %s: %s", expression, exc.reason)
            continue

        if matches == 1:
            candidates.append(Candidate(type="Optimized", expression=context.prefixed(expression), description=description))
    return candidates


def _optimized_drafts(context: GenerationContext) -> Iterator[tuple[str, str]]:
    target = context.target
    accessor = context.accessor
    tag = target.tag

    for name, value in target.attributes.items():
        if name.lower() in OPTIMIZED_SKIPPED_ATTRIBUTES or not is_xpath_name(name):
            continue
        yield f"//{tag}[@{name}={xpath_literal(value)}]", f"Unique combination of tag and {name} attribute"

    for token in target.classes:
        yield f"//{tag}[contains(@class,{xpath_literal(token)})]", f'Unique combination of tag and class "{token}"'

    if target.direct_text:
        if len(target.direct_text) < context.settings.text_exact_limit:
            exact = exact_text_expression(target)
            if exact:
                yield exact, "Unique combination of tag and text content"
        partial = contains_text_expression(target, context.settings.text_word_count)
        if partial:
            yield partial, "Unique combination of tag and partial text content"

    parent = target.parent
    body = accessor.body(target.document)
    if parent is None or parent is body:
        return
    parent_tag = accessor.tag_name(parent)
    position = accessor.same_tag_position(target.handle)
    for token in (parent.get("class") or "").split():
        yield (
            f"//{parent_tag}[contains(@class,{xpath_literal(token)})]/{tag}[{position}]",
            f"Unique path using parent's class \"{token}\" and position",
        )
