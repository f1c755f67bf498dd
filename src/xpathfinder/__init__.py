from __future__ import annotations

__version__ = "0.1.0"

from .dom_tree import PageTree, TreeAccessor, absolute_xpath, short_xpath
from .locator_generator import generate_candidates, group_candidates
from .models import Candidate, GenerationContext, GenerationResult
from .oracle import LxmlOracle, OracleEvaluationError, PageOracle
from .session import SelectionSession
from .settings import EngineSettings, load_settings

__all__ = [
    "Candidate",
    "EngineSettings",
    "GenerationContext",
    "GenerationResult",
    "LxmlOracle",
    "OracleEvaluationError",
    "PageOracle",
    "PageTree",
    "SelectionSession",
    "TreeAccessor",
    "absolute_xpath",
    "generate_candidates",
    "group_candidates",
    "load_settings",
    "short_xpath",
]
