from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Any, Callable, Literal

from .dom_tree import TreeAccessor
from .locator_generator import generate_candidates
from .models import GenerationResult
from .oracle import UniquenessOracle
from .settings import EngineSettings

SessionState = Literal["inactive", "active"]
SessionCommand = Literal["activate", "deactivate", "navigate", "status"]

logger = logging.getLogger("xpathfinder.session")


def _noop() -> None:
    return None


@dataclass(slots=True)
class SelectionSession:
    """Two-state selection mode: listeners are attached only while active."""

    attach_listeners: Callable[[], None] = _noop
    detach_listeners: Callable[[], None] = _noop
    oracle: UniquenessOracle | None = None
    settings: EngineSettings = field(default_factory=EngineSettings)
    state: SessionState = "inactive"
    last_result: GenerationResult | None = None

    @property
    def active(self) -> bool:
        return self.state == "active"

    def activate(self) -> bool:
        if self.active:
            return False
        self.attach_listeners()
        self.state = "active"
        logger.info("Element selection activated.")
        return True

    def deactivate(self) -> bool:
        if not self.active:
            return False
        try:
            self.detach_listeners()
        finally:
            self.state = "inactive"
        logger.info("Element selection deactivated.")
        return True

    def navigate(self) -> None:
        self.deactivate()
        self.last_result = None

    def select(self, accessor: TreeAccessor, node: Any) -> GenerationResult | None:
        if not self.active:
            logger.info("Selection ignored because the session is inactive.")
            return None
        result = generate_candidates(accessor, node, oracle=self.oracle, settings=self.settings)
        self.last_result = result
        return result

    def handle_command(self, command: SessionCommand) -> dict[str, Any]:
        if command == "activate":
            self.activate()
            return {"success": True, "active": self.active, "message": "Element selection activated"}
        if command == "deactivate":
            self.deactivate()
            return {"success": True, "active": self.active, "message": "Element selection deactivated"}
        if command == "navigate":
            self.navigate()
            return {"success": True, "active": self.active, "message": "Session reset after navigation"}
        if command == "status":
            return {"success": True, "active": self.active, "message": self.state}
        return {"success": False, "active": self.active, "message": f"Unknown command: {command}"}
