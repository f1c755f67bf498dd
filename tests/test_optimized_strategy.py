from typing import Any

import pytest

from xpathfinder.dom_tree import Document, PageTree, TreeAccessor
from xpathfinder.locator_generator import build_context
from xpathfinder.models import GenerationContext
from xpathfinder.optimized import optimized_candidates
from xpathfinder.oracle import LxmlOracle, OracleEvaluationError
from xpathfinder.settings import EngineSettings


class _RecordingOracle:
    def __init__(self, result: int = 1, failing: str | None = None) -> None:
        self.result = result
        self.failing = failing
        self.calls: list[tuple[str, Any]] = []

    def count(self, expression: str, scope: Document) -> int:
        self.calls.append((expression, scope))
        if self.failing and self.failing in expression:
            raise OracleEvaluationError(expression, "unsupported")
        return self.result


def _context(body: str, target: str, settings: EngineSettings | None = None) -> GenerationContext:
    tree = PageTree.from_html(f"<html><head><title>t</title></head><body>{body}</body></html>")
    accessor = TreeAccessor(tree)
    return build_context(accessor, tree.top.root.xpath(target)[0], settings)


def test_only_unique_expressions_survive_duplicate_ids() -> None:
    body = '<div id="dup" class="card">A</div><div id="dup" class="card special">B</div>'
    context = _context(body, "//div[2]")

    expressions = [candidate.expression for candidate in optimized_candidates(context, LxmlOracle())]

    assert expressions == [
        '//div[contains(@class,"special")]',
        '//div[text()="B"]',
        '//div[text()[contains(normalize-space(),"B")]]',
    ]


def test_parent_class_and_position_family() -> None:
    context = _context('<div class="row"><span></span><span></span></div>', "//span[2]")

    candidates = optimized_candidates(context, LxmlOracle())

    assert [candidate.expression for candidate in candidates] == ['//div[contains(@class,"row")]/span[2]']
    assert candidates[0].type == "Optimized"


def test_id_and_class_attributes_are_not_attribute_drafts() -> None:
    oracle = _RecordingOracle()
    context = _context('<a id="home" class="nav" rel="home">Home</a>', "//a")

    optimized_candidates(context, oracle)

    queried = [expression for expression, _ in oracle.calls]
    assert '//a[@rel="home"]' in queried
    assert not any("@id" in expression for expression in queried)
    assert not any("@class=" in expression for expression in queried)


def test_evaluation_errors_drop_the_candidate() -> None:
    oracle = _RecordingOracle(failing="text()")
    context = _context('<button name="go">Go</button>', "//button")

    expressions = [candidate.expression for candidate in optimized_candidates(context, oracle)]

    assert expressions == ['//button[@name="go"]']


def test_oracle_queries_are_capped_by_budget() -> None:
    oracle = _RecordingOracle()
    settings = EngineSettings(max_oracle_queries=2)
    context = _context('<input name="a" title="b" type="text" data-x="c">', "//input", settings)

    candidates = optimized_candidates(context, oracle)

    assert len(oracle.calls) == 2
    assert len(candidates) == 2


def test_oracle_is_scoped_to_the_target_document() -> None:
    oracle = _RecordingOracle(result=0)
    context = _context("<p>x</p>", "//p")

    assert optimized_candidates(context, oracle) == []
    assert oracle.calls
    assert all(scope is context.target.document for _, scope in oracle.calls)


def test_lxml_oracle_reports_invalid_and_non_node_expressions() -> None:
    document = PageTree.from_html("<html><body><div></div><div></div></body></html>").top
    oracle = LxmlOracle()

    assert oracle.count("//div", document) == 2
    with pytest.raises(OracleEvaluationError):
        oracle.count("//div[", document)
    with pytest.raises(OracleEvaluationError) as excinfo:
        oracle.count("count(//div)", document)
    assert excinfo.value.expression == "count(//div)"
