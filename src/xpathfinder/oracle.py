from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from lxml import etree
from playwright.sync_api import Error as PlaywrightError

if TYPE_CHECKING:
    from .dom_tree import Document


class OracleEvaluationError(Exception):
    """Raised when an expression cannot be evaluated against a document."""

    def __init__(self, expression: str, reason: str) -> None:
        super().__init__(f"Could not evaluate {expression!r}: {reason}")
        self.expression = expression
        self.reason = reason


class UniquenessOracle(Protocol):
    def count(self, expression: str, scope: Document) -> int: ...


class LxmlOracle:
    """Counts matches by evaluating the expression on the parsed document."""

    def count(self, expression: str, scope: Document) -> int:
        try:
            result = scope.root.getroottree().xpath(expression)
        except etree.XPathError as exc:
            raise OracleEvaluationError(expression, str(exc)) from exc

        if not isinstance(result, list):
            raise OracleEvaluationError(expression, f"expression yields {type(result).__name__}, not nodes")
        return len(result)


class PageOracle:
    """Counts matches in the live frame a document was captured from."""

    def __init__(self, fallback: UniquenessOracle | None = None) -> None:
        self._fallback = fallback or LxmlOracle()

    def count(self, expression: str, scope: Document) -> int:
        frame = scope.live_frame
        if frame is None:
            return self._fallback.count(expression, scope)

        try:
            return frame.locator(f"xpath={expression}").count()
        except PlaywrightError as exc:
            raise OracleEvaluationError(expression, str(exc)) from exc
