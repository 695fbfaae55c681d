from pathlib import Path

import pytest

from loadwatch.config.defaults import DEFAULTS, LOADING_DEFAULTS
from loadwatch.config.loader import load_config, loading_delays


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    loaded = load_config(config_path)
    assert loaded == DEFAULTS
    assert loaded is not DEFAULTS  # caller can mutate safely


def test_load_config_merges_overrides(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text(
        """
        [loading]
        start_delay = 0.5

        [logging]
        level = "debug"
        """,
        encoding="utf-8",
    )

    loaded = load_config(config_path)

    assert loaded["loading"]["start_delay"] == 0.5
    assert loaded["loading"]["end_delay"] == DEFAULTS["loading"]["end_delay"]
    assert loaded["logging"]["level"] == "debug"
    assert loaded["demo"] == DEFAULTS["demo"]


def test_load_config_raises_value_error_on_bad_toml(tmp_path: Path) -> None:
    config_path = tmp_path / "config.toml"
    config_path.write_text("this is not valid toml", encoding="utf-8")

    with pytest.raises(ValueError):
        load_config(config_path)


def test_load_config_rejects_directory(tmp_path: Path) -> None:
    with pytest.raises(IsADirectoryError):
        load_config(tmp_path)


def test_loading_delays_defaults_and_validation() -> None:
    assert loading_delays(DEFAULTS) == (0.33, 0.10)
    assert loading_delays({"loading": {"end_delay": 0.25}}) == (0.33, 0.25)

    with pytest.raises(ValueError):
        loading_delays({"loading": {"start_delay": -1}})


def test_loading_delays_fall_back_to_loading_defaults(tmp_path: Path) -> None:
    assert loading_delays({}) == (LOADING_DEFAULTS["start_delay"], LOADING_DEFAULTS["end_delay"])

    loaded = load_config(tmp_path / "config.toml")
    loaded["loading"]["start_delay"] = 5.0
    assert LOADING_DEFAULTS["start_delay"] == 0.33
