"""Unit tests for theme module.

Tests for theme loading, validation, and Rich theme generation.
"""

# pyright: reportPrivateUsage=false

from pathlib import Path
from unittest.mock import patch

import pytest
import targetgc.core.theme as theme_module
from rich.theme import Theme
from targetgc.core.theme import (
    ThemeColors,
    _load_toml_colors,
    get_bundled_theme_path,
    get_rich_theme,
    get_theme,
    load_theme,
)


class TestThemeColors:
    """Tests for ThemeColors Pydantic model."""

    def test_default_values(self) -> None:
        """ThemeColors has sensible defaults."""
        colors = ThemeColors()
        assert colors.text == "#ffffff"
        assert colors.keep == "#69B9A1"
        assert colors.delete == "#f53263"

    def test_valid_hex_colors(self) -> None:
        colors = ThemeColors(text="#AABBCC", muted="#abc")
        assert colors.text == "#AABBCC"
        assert colors.muted == "#abc"

    def test_invalid_hex_no_hash(self) -> None:
        with pytest.raises(ValueError, match="must start with '#'"):
            ThemeColors(text="ffffff")

    def test_invalid_hex_wrong_length(self) -> None:
        with pytest.raises(ValueError, match="must be #RGB or #RRGGBB"):
            ThemeColors(skip="#ff")

    def test_invalid_hex_chars(self) -> None:
        with pytest.raises(ValueError, match="invalid hex color"):
            ThemeColors(delete="#gggggg")

    def test_extra_fields_forbidden(self) -> None:
        with pytest.raises(ValueError):
            ThemeColors(package_manual="#ffffff")  # type: ignore[call-arg]


class TestLoadTomlColors:
    """Tests for _load_toml_colors internal function."""

    def test_loads_valid_toml(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = "#000000"\nkeep = "#aabbcc"\n')

        result = _load_toml_colors(theme_file)

        assert result == {"text": "#000000", "keep": "#aabbcc"}

    def test_returns_none_for_missing_file(self, tmp_path: Path) -> None:
        assert _load_toml_colors(tmp_path / "nonexistent.toml") is None

    def test_returns_none_for_invalid_toml(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text("not valid [ toml syntax")

        assert _load_toml_colors(theme_file) is None

    def test_ignores_non_string_values(self, tmp_path: Path) -> None:
        theme_file = tmp_path / "theme.toml"
        theme_file.write_text('[colors]\ntext = 3\ninfo = "#123"\n')

        assert _load_toml_colors(theme_file) == {"info": "#123"}

    def test_bundled_theme_is_complete(self) -> None:
        """The shipped theme defines every color."""
        result = _load_toml_colors(Path(get_bundled_theme_path()))

        assert result is not None
        assert set(result) == set(ThemeColors.model_fields)


class TestLoadTheme:
    """Tests for load_theme function."""

    def test_loads_bundled_theme(self, tmp_path: Path) -> None:
        with patch(
            "targetgc.core.theme.get_user_theme_path",
            return_value=tmp_path / "missing.toml",
        ):
            colors = load_theme()

        assert colors == ThemeColors()

    def test_user_theme_overrides_bundled(self, tmp_path: Path) -> None:
        """User theme overrides bundled theme values."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\ndelete = "#ff0000"\n')

        with patch("targetgc.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_theme()

        assert colors.delete == "#ff0000"
        assert colors.keep == "#69B9A1"

    def test_invalid_user_color_falls_back(self, tmp_path: Path) -> None:
        """An invalid user color falls back to the defaults."""
        user_theme = tmp_path / "theme.toml"
        user_theme.write_text('[colors]\ndelete = "red"\n')

        with patch("targetgc.core.theme.get_user_theme_path", return_value=user_theme):
            colors = load_theme()

        assert colors == ThemeColors()


class TestGetRichTheme:
    """Tests for get_rich_theme function."""

    def test_returns_rich_theme(self) -> None:
        assert isinstance(get_rich_theme(ThemeColors()), Theme)

    def test_includes_plan_styles(self) -> None:
        theme = get_rich_theme(ThemeColors())

        for style in ("plan.keep", "plan.delete", "plan.skip", "entry.path", "entry.size"):
            assert style in theme.styles

    def test_uses_provided_colors(self) -> None:
        theme = get_rich_theme(ThemeColors(keep="#123456"))

        assert theme.styles["plan.keep"].color is not None
        assert theme.styles["plan.keep"].color.name == "#123456"


class TestGetTheme:
    """Tests for get_theme caching function."""

    def test_caches_theme(self) -> None:
        theme_module._cached_theme = None

        theme1 = get_theme()
        theme2 = get_theme()

        assert isinstance(theme1, Theme)
        assert theme1 is theme2
