from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
from pathlib import Path

CONFIG_DIR = Path.home() / ".xpathfinder"
CONFIG_PATH = CONFIG_DIR / "config.json"

DEFAULT_EXCLUDED_ATTRIBUTES = ("id", "class", "style", "href", "target", "onclick")
DEFAULT_FRAME_PLACEHOLDER = "//*[self::iframe or self::frame]"
RESERVED_DATA_ATTRIBUTE = "data-xpathfinder"
MAX_ANCESTOR_DEPTH = 3

logger = logging.getLogger("xpathfinder.settings")


@dataclass(slots=True)
class EngineSettings:
    text_exact_limit: int = 50
    contains_prefix_length: int = 10
    text_word_count: int = 3
    ancestor_depth: int = 3
    max_oracle_queries: int = 40
    frame_placeholder: str = DEFAULT_FRAME_PLACEHOLDER
    excluded_attributes: tuple[str, ...] = field(default=DEFAULT_EXCLUDED_ATTRIBUTES)
    reserved_data_attribute: str = RESERVED_DATA_ATTRIBUTE

    def __post_init__(self) -> None:
        # The identifier anchor scan never goes deeper than three levels.
        self.ancestor_depth = min(MAX_ANCESTOR_DEPTH, self.ancestor_depth)


def load_settings(config_path: Path | None = None) -> EngineSettings:
    path = config_path or CONFIG_PATH
    if not path.exists() or not path.is_file():
        return EngineSettings()

    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError, TypeError) as exc:
        logger.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return EngineSettings()

    if not isinstance(payload, dict):
        return EngineSettings()

    defaults = EngineSettings()
    excluded = payload.get("excluded_attributes")
    if isinstance(excluded, list) and all(isinstance(item, str) for item in excluded):
        excluded_attributes = tuple(item.strip().lower() for item in excluded if item.strip())
    else:
        excluded_attributes = defaults.excluded_attributes

    return EngineSettings(
        text_exact_limit=_positive_int(payload.get("text_exact_limit"), defaults.text_exact_limit),
        contains_prefix_length=_positive_int(payload.get("contains_prefix_length"), defaults.contains_prefix_length),
        text_word_count=_positive_int(payload.get("text_word_count"), defaults.text_word_count),
        ancestor_depth=_positive_int(payload.get("ancestor_depth"), defaults.ancestor_depth),
        max_oracle_queries=_positive_int(payload.get("max_oracle_queries"), defaults.max_oracle_queries),
        frame_placeholder=str(payload.get("frame_placeholder") or defaults.frame_placeholder),
        excluded_attributes=excluded_attributes,
        reserved_data_attribute=str(payload.get("reserved_data_attribute") or defaults.reserved_data_attribute),
    )


def _positive_int(raw: object, default: int) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int):
        return default
    return raw if raw > 0 else default
