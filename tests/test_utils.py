# tests/test_utils.py
"""Unit tests for utility functions in the `rawed.utils` module."""

from pathlib import Path

import pytest

from rawed.utils import utils


def test_deep_merge() -> None:
    """Verify that `deep_merge` correctly merges nested dictionaries.

    This test ensures:
    - Existing values are preserved if not overridden.
    - Nested dictionaries are merged recursively.
    - Conflicting keys are overridden by values from the second dictionary.
    """
    base = {"a": 1, "b": {"x": 10, "y": 20}}
    override = {"b": {"y": 99, "z": 100}, "c": 3}
    result = utils.deep_merge(base, override)
    expected = {"a": 1, "b": {"x": 10, "y": 99, "z": 100}, "c": 3}
    assert result == expected
    # The inputs are left untouched.
    assert base == {"a": 1, "b": {"x": 10, "y": 20}}


def test_load_config_creates_templates_and_uses_defaults(tmp_path: Path) -> None:
    config_dir = tmp_path / "rawed"
    config = utils.load_config(config_dir)

    assert (config_dir / ".env").is_file()
    assert "RAWED_KEYTRACE" in (config_dir / ".env").read_text(encoding="utf-8")
    assert config["editor"]["row_marker"] == "~"
    assert config["keybindings"]["quit"] == utils.DEFAULT_CONFIG["keybindings"]["quit"]


def test_load_config_merges_user_file(tmp_path: Path) -> None:
    (tmp_path / "config.toml").write_text(
        '[editor]\nbanner = "hello"\n\n[keybindings]\nquit = "ctrl+x"\n',
        encoding="utf-8",
    )
    config = utils.load_config(tmp_path)

    assert config["editor"]["banner"] == "hello"
    # Keys missing from the user file keep their defaults.
    assert config["editor"]["read_timeout_ms"] == 100
    assert config["keybindings"]["quit"] == "ctrl+x"
    assert config["keybindings"]["handle_up"] == ["up"]


def test_load_config_survives_broken_toml(tmp_path: Path) -> None:
    (tmp_path / "config.toml").write_text("[editor\nbanner = ", encoding="utf-8")
    config = utils.load_config(tmp_path)
    assert config == utils.DEFAULT_CONFIG


def test_default_config_is_not_mutated(tmp_path: Path) -> None:
    config = utils.load_config(tmp_path)
    config["editor"]["banner"] = "changed"
    assert utils.DEFAULT_CONFIG["editor"]["banner"] != "changed"


@pytest.mark.parametrize(
    "millis, expected",
    [
        (100, 1),
        (250, 2),
        (1000, 10),
        (0, 1),
        (-40, 1),
        (100000, 255),
        ("300", 3),
        ("soon", 1),
        (None, 1),
    ],
)
def test_read_timeout_deciseconds(millis, expected) -> None:
    assert utils.read_timeout_deciseconds({"editor": {"read_timeout_ms": millis}}) == expected


def test_read_timeout_default() -> None:
    assert utils.read_timeout_deciseconds({}) == 1
