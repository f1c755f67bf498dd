from __future__ import annotations

from .dom_tree import absolute_xpath
from .models import Candidate, CandidateType, ElementNode, GenerationContext
from .xpath_format import (
    first_words,
    is_xpath_name,
    normalize_space,
    ordinal,
    src_filename,
    step,
    xpath_literal,
)

DEDICATED_ATTRIBUTES = ("name", "placeholder", "title")


def absolute_candidates(context: GenerationContext) -> list[Candidate]:
    expression = absolute_xpath(context.accessor, context.target.handle)
    description = "Complete path from the root of the document"
    if context.frame_chain:
        description += " (inside a frame)"
    return [_candidate(context, "Absolute", expression, description)]


def identifier_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    accessor = context.accessor
    candidates: list[Candidate] = []
    seen: set[str] = set()

    if target.identifier:
        _add_unique(
            candidates,
            _candidate(
                context,
                "Identifier",
                f"//{target.tag}[@id={xpath_literal(target.identifier)}]",
                "Using element's tag name and ID attribute",
            ),
            seen,
        )

    anchor = accessor.nearest_identified_ancestor(target.handle, context.settings.ancestor_depth)
    if anchor is not None:
        anchor_id = anchor.get("id")
        path = accessor.relative_path(target.handle, anchor)
        _add_unique(
            candidates,
            _candidate(
                context,
                "Identifier",
                f"//*[@id={xpath_literal(anchor_id)}]{path}",
                f'Relative to ancestor with ID "{anchor_id}"',
            ),
            seen,
        )

    return candidates


def class_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    if not isinstance(target.class_value, str) or not target.classes:
        return []

    candidates: list[Candidate] = []
    seen: set[str] = set()
    for token in target.classes:
        _add_unique(
            candidates,
            _candidate(
                context,
                "Class",
                f"//{target.tag}[contains(@class,{xpath_literal(token)})]",
                f'Using tag name and class "{token}"',
            ),
            seen,
        )

    if len(target.classes) >= 2:
        # Follows the token order the document was written with.
        _add_unique(
            candidates,
            _candidate(
                context,
                "Class",
                f"//*[@class={xpath_literal(target.class_value)}]",
                "Using exact class attribute match",
            ),
            seen,
        )
    return candidates


def attribute_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    settings = context.settings
    tag = target.tag
    excluded = {name.lower() for name in settings.excluded_attributes} | {settings.reserved_data_attribute}
    prefix_length = settings.contains_prefix_length
    candidates: list[Candidate] = []
    seen: set[str] = set()

    for name, value in target.attributes.items():
        if name.lower() in excluded or not value or not is_xpath_name(name):
            continue
        _add_unique(
            candidates,
            _candidate(context, "Attribute", f"//{tag}[@{name}={xpath_literal(value)}]", f'Using exact "{name}" attribute'),
            seen,
        )
        if len(value) > prefix_length:
            _add_unique(
                candidates,
                _candidate(
                    context,
                    "Attribute",
                    f"//{tag}[contains(@{name},{xpath_literal(value[:prefix_length])})]",
                    f'Using partial "{name}" attribute (first {prefix_length} characters)',
                ),
                seen,
            )

    for name in DEDICATED_ATTRIBUTES:
        value = target.attr(name)
        if value:
            _add_unique(
                candidates,
                _candidate(context, "Attribute", f"//*[@{name}={xpath_literal(value)}]", f"Using {name} attribute"),
                seen,
            )

    if tag == "img":
        filename = src_filename(target.attr("src") or "")
        if filename:
            _add_unique(
                candidates,
                _candidate(
                    context,
                    "Attribute",
                    f"//img[contains(@src,{xpath_literal(filename)})]",
                    f'Using image filename "{filename}" in src attribute',
                ),
                seen,
            )

    if tag == "input":
        input_type = target.attr("type")
        if input_type:
            expression = f"//input[@type={xpath_literal(input_type)}]"
        else:
            # Browsers treat an input without a type attribute as a text input.
            expression = '//input[not(@type) or @type="text"]'
        _add_unique(candidates, _candidate(context, "Attribute", expression, "Using input type attribute"), seen)

    for name, value in target.attributes.items():
        lowered = name.lower()
        if not lowered.startswith("data-") or lowered == settings.reserved_data_attribute:
            continue
        if not is_xpath_name(name):
            continue
        expression = f"//*[@{name}={xpath_literal(value)}]" if value else f"//*[@{name}]"
        _add_unique(
            candidates,
            _candidate(context, "Attribute", expression, f'Using "{name}" testing hook'),
            seen,
        )

    return candidates


def text_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    if target.tag == "select":
        return _select_text_candidates(context)

    # Direct text only: aggregate text would make every container match its content.
    if not target.direct_text:
        return []

    candidates: list[Candidate] = []
    seen: set[str] = set()
    if len(target.direct_text) < context.settings.text_exact_limit:
        exact = exact_text_expression(target)
        if exact:
            _add_unique(candidates, _candidate(context, "Text", exact, "Using exact text content match"), seen)

    partial = contains_text_expression(target, context.settings.text_word_count)
    if partial:
        _add_unique(candidates, _candidate(context, "Text", partial, "Using partial text content match"), seen)
    return candidates


def position_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    accessor = context.accessor
    node = target.handle
    tag = target.tag
    candidates: list[Candidate] = []
    seen: set[str] = set()

    position_all = accessor.position_among_all(node)
    _add_unique(
        candidates,
        _candidate(
            context,
            "Position",
            f"//*[{position_all}][self::{tag}]",
            f"{ordinal(position_all)} child of its parent, a {tag} element",
        ),
        seen,
    )

    position = accessor.same_tag_position(node)
    if position > 1 or accessor.has_following_same_tag(node):
        _add_unique(
            candidates,
            _candidate(context, "Position", f"//{tag}[{position}]", f"{ordinal(position)} {tag} element among siblings"),
            seen,
        )

    parent = target.parent
    if parent is not None:
        parent_tag = accessor.tag_name(parent)
        _add_unique(
            candidates,
            _candidate(context, "Position", f"//{parent_tag}/{tag}[{position}]", f"Direct child of {parent_tag} element"),
            seen,
        )

        parent_position = accessor.same_tag_position(parent)
        if parent_position > 1 or accessor.has_following_same_tag(parent):
            _add_unique(
                candidates,
                _candidate(
                    context,
                    "Position",
                    f"//{parent_tag}[{parent_position}]/{tag}[{position}]",
                    f"Child of the {ordinal(parent_position)} {parent_tag} element",
                ),
                seen,
            )

    anchored = _anchored_relative_candidate(context)
    if anchored:
        _add_unique(candidates, anchored, seen)
    return candidates


def exact_text_expression(target: ElementNode) -> str | None:
    text = target.direct_text
    if not text:
        return None
    if text in target.text_chunks:
        return f"//{target.tag}[text()={xpath_literal(text)}]"
    if len(target.text_chunks) == 1:
        return f"//{target.tag}[text()[normalize-space()={xpath_literal(normalize_space(target.text_chunks[0]))}]]"
    # Direct text split across several text nodes has no single node to compare against.
    return None


def contains_text_expression(target: ElementNode, word_count: int) -> str | None:
    if not target.text_chunks:
        return None
    words = first_words(target.text_chunks[0], word_count)
    if not words:
        return None
    return f"//{target.tag}[text()[contains(normalize-space(),{xpath_literal(words)})]]"


def _select_text_candidates(context: GenerationContext) -> list[Candidate]:
    target = context.target
    if target.label_text:
        literal = xpath_literal(target.label_text)
        if target.label_wraps:
            expression = f"//label[text()[contains(normalize-space(),{literal})]]//select"
        else:
            expression = f"//select[@id=//label[normalize-space()={literal}]/@for]"
        return [_candidate(context, "Text", expression, f'Using associated label "{target.label_text}"')]

    for name in ("aria-label", "placeholder"):
        value = target.attr(name)
        if value:
            return [_candidate(context, "Text", f"//select[@{name}={xpath_literal(value)}]", f"Using {name} of the select")]

    if target.first_option_text:
        return [
            _candidate(
                context,
                "Text",
                f"//select[(.//option)[1][normalize-space()={xpath_literal(target.first_option_text)}]]",
                f'Using first option text "{target.first_option_text}"',
            )
        ]
    return []


def _anchored_relative_candidate(context: GenerationContext) -> Candidate | None:
    target = context.target
    accessor = context.accessor
    node = target.handle

    anchor = accessor.nearest_identified_ancestor(node, context.settings.ancestor_depth)
    if anchor is not None:
        anchor_id = anchor.get("id")
        return _candidate(
            context,
            "Position",
            f"//*[@id={xpath_literal(anchor_id)}]{accessor.relative_path(node, anchor)}",
            f'Relative to ancestor with ID "{anchor_id}"',
        )

    body = accessor.body(target.document)
    if body is None:
        return None

    segments: list[str] = []
    current = node
    for _ in range(context.settings.ancestor_depth):
        parent = accessor.parent(current)
        if parent is None:
            break
        segments.append(step(accessor.tag_name(current), accessor.same_tag_position(current)))
        current = parent
        if current is body:
            break

    if not segments:
        return None
    segments.reverse()
    path = "".join(segments)
    if current is body:
        return _candidate(context, "Position", f"//body{path}", "Relative path from body element")
    if any(ancestor is body for ancestor in accessor.ancestors(current)):
        return _candidate(context, "Position", f"//body/{path}", "Relative path below the body element")
    return None


def _candidate(context: GenerationContext, kind: CandidateType, expression: str, description: str) -> Candidate:
    return Candidate(type=kind, expression=context.prefixed(expression), description=description)


def _add_unique(candidates: list[Candidate], candidate: Candidate, seen: set[str]) -> None:
    if candidate.expression in seen:
        return
    seen.add(candidate.expression)
    candidates.append(candidate)
