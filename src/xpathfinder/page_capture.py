from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from lxml import etree
from playwright.sync_api import Error as PlaywrightError

from .dom_tree import Accessible, Document, FrameAccess, Inaccessible, PageTree, parse_document

if TYPE_CHECKING:
    from playwright.sync_api import ElementHandle, Frame, Page

logger = logging.getLogger("xpathfinder.capture")

_ELEMENT_PATH_SCRIPT = """
(el) => {
  const parts = [];
  let current = el;
  while (current && current.nodeType === Node.ELEMENT_NODE) {
    let nth = 1;
    let sibling = current;
    while ((sibling = sibling.previousElementSibling)) {
      if (sibling.tagName === current.tagName) nth += 1;
    }
    parts.unshift(`${current.tagName.toLowerCase()}[${nth}]`);
    current = current.parentElement;
  }
  return '/' + parts.join('/');
}
"""


def capture_page_tree(page: Page) -> PageTree:
    """Snapshot the page and all of its frames into parsed documents.

    Each document keeps a reference to the live frame it came from so the
    page oracle can query the browser directly.
    """
    main = page.main_frame
    top = Document(root=parse_document(main.content()), name=main.name or "main", live_frame=main)
    tree = PageTree(top)
    _capture_child_frames(tree, main, top)
    return tree


def frame_access(frame: Frame, parent_document: Document) -> FrameAccess:
    try:
        path = frame.frame_element().evaluate(_ELEMENT_PATH_SCRIPT)
    except PlaywrightError as exc:
        return Inaccessible(str(exc).splitlines()[0] if str(exc) else "cross-origin", parent_document)

    element = _find_single(parent_document.root, str(path or ""))
    if element is None:
        return Inaccessible("frame element not found in snapshot", parent_document)
    return Accessible(element)


def locate_element(tree: PageTree, handle: ElementHandle) -> Any | None:
    frame = handle.owner_frame()
    document = next((item for item in tree.documents if item.live_frame is frame), None)
    if document is None:
        logger.warning("Element belongs to a frame that was not captured.")
        return None

    try:
        path = handle.evaluate(_ELEMENT_PATH_SCRIPT)
    except PlaywrightError as exc:
        logger.warning("Could not compute element path: %s", exc)
        return None

    node = _find_single(document.root, str(path or ""))
    if node is None:
        logger.warning("Element path %s did not resolve to one node in the snapshot.", path)
    return node


def _capture_child_frames(tree: PageTree, frame: Frame, parent_document: Document) -> None:
    for child in frame.child_frames:
        name = child.name or child.url
        try:
            markup = child.content()
        except PlaywrightError as exc:
            logger.warning("Skipping frame %s: %s", name, exc)
            continue
        if not markup.strip():
            continue

        access = frame_access(child, parent_document)
        if isinstance(access, Accessible):
            document = tree.attach_frame(access.frame_element, markup, name=name)
        else:
            logger.info("Frame %s is not addressable from its parent (%s).", name, access.reason)
            document = tree.attach_inaccessible_frame(markup, reason=access.reason, parent=access.parent, name=name)
        document.live_frame = child
        _capture_child_frames(tree, child, document)


def _find_single(root: Any, path: str) -> Any | None:
    if not path or path == "/":
        return None
    try:
        matches = root.getroottree().xpath(path)
    except etree.XPathError:
        return None
    if not isinstance(matches, list) or len(matches) != 1:
        return None
    return matches[0]


_MISSING_BROWSER_ERROR_HINTS = (
    "executable doesn't exist",
    "executable does not exist",
    "download new browsers",
    "playwright install",
    "could not find browser",
)


def is_missing_browser_error(exc: Exception) -> bool:
    message = str(exc).lower()
    return any(hint in message for hint in _MISSING_BROWSER_ERROR_HINTS)
