from typing import Any

import pytest
from playwright.sync_api import Error as PlaywrightError

from xpathfinder.dom_tree import Accessible, Document, Inaccessible, PageTree, TreeAccessor, parse_document
from xpathfinder.frames import resolve_frame_chain
from xpathfinder.oracle import LxmlOracle, OracleEvaluationError, PageOracle
from xpathfinder.page_capture import capture_page_tree, is_missing_browser_error, locate_element
from xpathfinder.settings import DEFAULT_FRAME_PLACEHOLDER


class _FakeLocator:
    def __init__(self, frame: "_FakeFrame", expression: str) -> None:
        self._frame = frame
        self._expression = expression

    def count(self) -> int:
        self._frame.queries.append(self._expression)
        if self._frame.locator_error:
            raise PlaywrightError(self._frame.locator_error)
        return self._frame.match_count


class _FakeHandle:
    def __init__(self, path: str | None, frame: "_FakeFrame | None" = None, error: str | None = None) -> None:
        self._path = path
        self._frame = frame
        self._error = error

    def evaluate(self, _script: str) -> Any:
        if self._error:
            raise PlaywrightError(self._error)
        return self._path

    def owner_frame(self) -> "_FakeFrame | None":
        return self._frame


class _FakeFrame:
    def __init__(
        self,
        html: str,
        *,
        name: str = "",
        element_path: str | None = None,
        element_error: str | None = None,
        content_error: str | None = None,
        children: list["_FakeFrame"] | None = None,
    ) -> None:
        self.html = html
        self.name = name
        self.url = f"https://example.test/{name or 'frame'}"
        self.child_frames = children or []
        self._element = _FakeHandle(element_path, error=element_error)
        self._content_error = content_error
        self.match_count = 1
        self.locator_error: str | None = None
        self.queries: list[str] = []

    def content(self) -> str:
        if self._content_error:
            raise PlaywrightError(self._content_error)
        return self.html

    def frame_element(self) -> _FakeHandle:
        return self._element

    def locator(self, expression: str) -> _FakeLocator:
        return _FakeLocator(self, expression)


class _FakePage:
    def __init__(self, main_frame: _FakeFrame) -> None:
        self.main_frame = main_frame


TOP = "<html><body><iframe name='pay'></iframe><iframe name='ads'></iframe></body></html>"
CHILD = "<html><body><button>Pay</button></body></html>"


def test_capture_attaches_accessible_and_inaccessible_frames() -> None:
    pay = _FakeFrame(CHILD, name="pay", element_path="/html[1]/body[1]/iframe[1]")
    ads = _FakeFrame(CHILD, name="ads", element_error="boom")
    main = _FakeFrame(TOP, children=[pay, ads])

    tree = capture_page_tree(_FakePage(main))

    top, pay_document, ads_document = tree.documents
    assert top.live_frame is main
    assert isinstance(pay_document.frame, Accessible)
    assert pay_document.frame.frame_element is top.root.xpath("//iframe")[0]
    assert pay_document.live_frame is pay
    assert ads_document.frame == Inaccessible("boom")
    assert ads_document.frame.parent is top


def test_capture_skips_unreadable_and_empty_frames() -> None:
    broken = _FakeFrame(CHILD, name="broken", content_error="detached")
    empty = _FakeFrame("   ", name="empty", element_path="/html[1]/body[1]/iframe[2]")
    tree = capture_page_tree(_FakePage(_FakeFrame(TOP, children=[broken, empty])))

    assert len(tree.documents) == 1


def test_frame_element_missing_from_snapshot_is_inaccessible() -> None:
    ghost = _FakeFrame(CHILD, name="ghost", element_path="/html[1]/body[1]/iframe[9]")
    tree = capture_page_tree(_FakePage(_FakeFrame(TOP, children=[ghost])))

    assert tree.documents[1].frame == Inaccessible("frame element not found in snapshot")


def test_locate_element_maps_handle_into_its_frame_document() -> None:
    pay = _FakeFrame(CHILD, name="pay", element_path="/html[1]/body[1]/iframe[1]")
    tree = capture_page_tree(_FakePage(_FakeFrame(TOP, children=[pay])))

    node = locate_element(tree, _FakeHandle("/html[1]/body[1]/button[1]", frame=pay))

    assert node is tree.documents[1].root.xpath("//button")[0]
    assert locate_element(tree, _FakeHandle("/html[1]/body[1]/button[1]", frame=_FakeFrame(CHILD))) is None
    assert locate_element(tree, _FakeHandle(None, frame=pay, error="gone")) is None


def test_page_oracle_counts_in_live_frame() -> None:
    frame = _FakeFrame(CHILD)
    frame.match_count = 3
    document = Document(root=parse_document(CHILD), live_frame=frame)

    assert PageOracle().count("//button", document) == 3
    assert frame.queries == ["xpath=//button"]

    frame.locator_error = "Unexpected token"
    with pytest.raises(OracleEvaluationError):
        PageOracle().count("//button[", document)


def test_page_oracle_falls_back_without_live_frame() -> None:
    document = PageTree.from_html(CHILD).top

    assert PageOracle(fallback=LxmlOracle()).count("//button", document) == 1


def test_missing_browser_error_detection() -> None:
    assert is_missing_browser_error(
        PlaywrightError("Executable doesn't exist at /ms-playwright/chromium-1105/chrome-linux/chrome")
    )
    assert not is_missing_browser_error(PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))


def test_blocked_frame_records_parent_for_chain_resolution() -> None:
    blocked = _FakeFrame(CHILD, name="blocked", element_error="cross-origin frame")
    pay = _FakeFrame(TOP, name="pay", element_path="/html[1]/body[1]/iframe[1]", children=[blocked])
    tree = capture_page_tree(_FakePage(_FakeFrame(TOP, children=[pay])))

    _, pay_document, blocked_document = tree.documents
    assert isinstance(blocked_document.frame, Inaccessible)
    assert blocked_document.frame.parent is pay_document
    assert resolve_frame_chain(TreeAccessor(tree), blocked_document.root.xpath("//button")[0]) == (
        "/html/body/iframe[1]",
        DEFAULT_FRAME_PLACEHOLDER,
    )
