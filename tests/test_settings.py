import json
from pathlib import Path

from xpathfinder.settings import EngineSettings, load_settings


def test_settings_load_from_file(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps({"text_exact_limit": 30, "max_oracle_queries": 10, "excluded_attributes": ["id", "style"]}),
        encoding="utf-8",
    )

    assert load_settings(config_path) == EngineSettings(
        text_exact_limit=30,
        max_oracle_queries=10,
        excluded_attributes=("id", "style"),
    )


def test_settings_load_fallbacks(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    assert load_settings(config_path) == EngineSettings()

    config_path.write_text("{invalid", encoding="utf-8")
    assert load_settings(config_path) == EngineSettings()

    config_path.write_text("[1, 2]", encoding="utf-8")
    assert load_settings(config_path) == EngineSettings()


def test_settings_ignore_invalid_values_and_cap_ancestor_depth(tmp_path: Path) -> None:
    config_path = tmp_path / "config.json"
    config_path.write_text(
        json.dumps(
            {
                "ancestor_depth": 7,
                "text_word_count": -1,
                "text_exact_limit": True,
                "contains_prefix_length": "12",
                "excluded_attributes": [" ID ", "Style", ""],
            }
        ),
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.ancestor_depth == 3
    assert settings.text_word_count == 3
    assert settings.text_exact_limit == 50
    assert settings.contains_prefix_length == 10
    assert settings.excluded_attributes == ("id", "style")


def test_ancestor_depth_is_capped_on_construction() -> None:
    assert EngineSettings(ancestor_depth=9).ancestor_depth == 3
    assert EngineSettings(ancestor_depth=2).ancestor_depth == 2
