from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Iterator

from lxml import etree
import lxml.html

from .models import ElementNode
from .xpath_format import normalize_space, step, xpath_literal

logger = logging.getLogger("xpathfinder.engine")

LABELLED_TAGS = {"input", "select", "textarea"}


@dataclass(frozen=True, slots=True)
class Accessible:
    frame_element: Any


@dataclass(frozen=True, slots=True)
class Inaccessible:
    reason: str = "cross-origin"
    parent: Document | None = field(default=None, compare=False, repr=False)


FrameAccess = Accessible | Inaccessible


@dataclass(eq=False, slots=True)
class Document:
    root: Any
    frame: FrameAccess | None = None
    name: str = ""
    live_frame: Any = field(default=None, repr=False)

    @property
    def is_top_level(self) -> bool:
        return self.frame is None


def parse_document(markup: str | bytes) -> Any:
    return lxml.html.document_fromstring(markup)


class PageTree:
    """The top-level document plus every frame document captured with it."""

    def __init__(self, top: Document) -> None:
        self.top = top
        self._documents: list[Document] = [top]

    @classmethod
    def from_html(cls, markup: str | bytes, *, name: str = "") -> PageTree:
        return cls(Document(root=parse_document(markup), name=name))

    @property
    def documents(self) -> list[Document]:
        return list(self._documents)

    def attach_frame(self, frame_element: Any, markup: str | bytes | Any, *, name: str = "") -> Document:
        document = Document(root=_as_root(markup), frame=Accessible(frame_element), name=name)
        self._documents.append(document)
        return document

    def attach_inaccessible_frame(
        self,
        markup: str | bytes | Any,
        *,
        reason: str = "cross-origin",
        parent: Document | None = None,
        name: str = "",
    ) -> Document:
        document = Document(root=_as_root(markup), frame=Inaccessible(reason, parent), name=name)
        self._documents.append(document)
        return document

    def document_of(self, node: Any) -> Document:
        root = node.getroottree().getroot()
        for document in self._documents:
            if document.root is root:
                return document
        logger.debug("Node <%s> belongs to an unregistered tree; treating it as top level.", node.tag)
        return Document(root=root)


class TreeAccessor:
    """Read-only navigation over the element trees of a :class:`PageTree`."""

    def __init__(self, page_tree: PageTree) -> None:
        self.page_tree = page_tree

    def document_of(self, node: Any) -> Document:
        return self.page_tree.document_of(node)

    def tag_name(self, node: Any) -> str:
        return etree.QName(node).localname.lower()

    def parent(self, node: Any) -> Any | None:
        return node.getparent()

    def children(self, node: Any) -> list[Any]:
        return list(node.iterchildren(etree.Element))

    def preceding_siblings(self, node: Any) -> list[Any]:
        siblings = list(node.itersiblings(etree.Element, preceding=True))
        siblings.reverse()
        return siblings

    def following_siblings(self, node: Any) -> list[Any]:
        return list(node.itersiblings(etree.Element))

    def ancestors(self, node: Any) -> Iterator[Any]:
        current = self.parent(node)
        while current is not None:
            yield current
            current = self.parent(current)

    def attributes(self, node: Any) -> dict[str, str]:
        return {str(key): str(value) for key, value in node.attrib.items()}

    def text_chunks(self, node: Any) -> list[str]:
        chunks = [node.text or ""]
        # Comments and processing instructions are not elements, but their tails are direct text.
        chunks.extend(child.tail or "" for child in node)
        return chunks

    def direct_text(self, node: Any) -> str:
        return "".join(self.text_chunks(node)).strip()

    def aggregate_text(self, node: Any) -> str:
        return str(node.xpath("string()")).strip()

    def body(self, document: Document) -> Any | None:
        for child in self.children(document.root):
            if self.tag_name(child) == "body":
                return child
        return None

    def position_among_all(self, node: Any) -> int:
        return len(self.preceding_siblings(node)) + 1

    def same_tag_position(self, node: Any) -> int:
        tag = self.tag_name(node)
        return 1 + sum(1 for sibling in self.preceding_siblings(node) if self.tag_name(sibling) == tag)

    def has_following_same_tag(self, node: Any) -> bool:
        tag = self.tag_name(node)
        return any(self.tag_name(sibling) == tag for sibling in self.following_siblings(node))

    def relative_path(self, node: Any, ancestor: Any) -> str:
        segments: list[str] = []
        current = node
        while current is not None and current is not ancestor:
            segments.append(step(self.tag_name(current), self.same_tag_position(current)))
            current = self.parent(current)
        segments.reverse()
        return "".join(segments)

    def nearest_identified_ancestor(self, node: Any, max_depth: int = 3) -> Any | None:
        body = self.body(self.document_of(node))
        depth = 0
        for ancestor in self.ancestors(node):
            if depth >= max_depth or ancestor is body:
                return None
            if (ancestor.get("id") or "").strip():
                return ancestor
            depth += 1
        return None

    def associated_label(self, node: Any) -> tuple[str, bool] | None:
        """Return the label text for a form control and whether the label wraps it.

        A wrapping label yields its first non-blank text node only.
        """
        if self.tag_name(node) not in LABELLED_TAGS:
            return None
        identifier = (node.get("id") or "").strip()
        if identifier:
            root = self.document_of(node).root
            for label in root.xpath("//label[@for=$identifier]", identifier=identifier):
                text = normalize_space(str(label.xpath("string()")))
                if text:
                    return text, False
        for ancestor in self.ancestors(node):
            if self.tag_name(ancestor) == "label":
                chunks = [chunk for chunk in self.text_chunks(ancestor) if normalize_space(chunk)]
                return (normalize_space(chunks[0]), True) if chunks else None
        return None

    def first_option_text(self, node: Any) -> str | None:
        if self.tag_name(node) != "select":
            return None
        for option in node.iter("option"):
            text = normalize_space(str(option.xpath("string()")))
            return text or None
        return None

    def view(self, node: Any) -> ElementNode:
        attributes = self.attributes(node)
        class_value = attributes.get("class")
        chunks = self.text_chunks(node)
        label = self.associated_label(node)
        return ElementNode(
            handle=node,
            tag=self.tag_name(node),
            identifier=attributes["id"] if (attributes.get("id") or "").strip() else None,
            class_value=class_value if isinstance(class_value, str) else None,
            classes=class_value.split() if isinstance(class_value, str) else [],
            attributes=attributes,
            direct_text="".join(chunks).strip(),
            text_chunks=[chunk for chunk in chunks if chunk.strip()],
            aggregate_text=self.aggregate_text(node),
            label_text=label[0] if label else None,
            label_wraps=label[1] if label else False,
            first_option_text=self.first_option_text(node),
            parent=self.parent(node),
            document=self.document_of(node),
        )


def absolute_xpath(accessor: TreeAccessor, node: Any) -> str:
    body = accessor.body(accessor.document_of(node))
    if node is body:
        return "/html/body"

    segments: list[str] = []
    current = node
    while current is not body:
        parent = accessor.parent(current)
        if parent is None:
            # Outside <body>: address the node from the document element.
            segments.reverse()
            return f"/{accessor.tag_name(current)}" + "".join(segments)
        segments.append(step(accessor.tag_name(current), accessor.same_tag_position(current)))
        current = parent
    segments.reverse()
    return "/html/body" + "".join(segments)


def short_xpath(accessor: TreeAccessor, node: Any) -> str:
    identifier = node.get("id") or ""
    if identifier.strip():
        return f"//*[@id={xpath_literal(identifier)}]"

    segments: list[str] = []
    current = node
    parent = accessor.parent(current)
    while parent is not None and len(segments) < 2:
        segments.append(step(accessor.tag_name(current), accessor.same_tag_position(current)))
        current = parent
        parent = accessor.parent(current)
    segments.reverse()
    return "..." + "".join(segments)


def _as_root(markup: str | bytes | Any) -> Any:
    if isinstance(markup, (str, bytes)):
        return parse_document(markup)
    return markup
