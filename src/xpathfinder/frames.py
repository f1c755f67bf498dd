from __future__ import annotations

import logging
from typing import Any

from .dom_tree import Inaccessible, TreeAccessor, absolute_xpath
from .models import FrameChain
from .settings import DEFAULT_FRAME_PLACEHOLDER

logger = logging.getLogger("xpathfinder.engine")


def resolve_frame_chain(
    accessor: TreeAccessor,
    node: Any,
    placeholder: str = DEFAULT_FRAME_PLACEHOLDER,
) -> FrameChain:
    """Return the frame fragments leading from the top document to ``node``'s document.

    Each accessible boundary contributes the absolute path of its frame element
    in the parent document. An inaccessible boundary contributes ``placeholder``
    and the walk continues from the parent document recorded for it; without a
    recorded parent the walk ends there, keeping whatever was resolved below it.
    """
    fragments: list[str] = []
    document = accessor.document_of(node)
    visited: set[int] = set()

    while document.frame is not None:
        if id(document) in visited:
            logger.warning("Frame cycle detected at %r; using placeholder.", document.name)
            fragments.append(placeholder)
            break
        visited.add(id(document))

        access = document.frame
        if isinstance(access, Inaccessible):
            logger.info("Frame %r is not accessible (%s); using placeholder.", document.name, access.reason)
            fragments.append(placeholder)
            if access.parent is None:
                break
            document = access.parent
            continue

        frame_element = access.frame_element
        fragments.append(absolute_xpath(accessor, frame_element))
        document = accessor.document_of(frame_element)

    fragments.reverse()
    return tuple(fragments)
