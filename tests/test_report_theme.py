from __future__ import annotations

import pytest
from pydantic import ValidationError

from farmacia_reports.core.report_config_models import ReportOptions, ReportThemeConfig
from farmacia_reports.core.report_theme import parse_color, to_rgb255
from farmacia_reports.services.pdf.theme import resolve_theme


@pytest.mark.parametrize(
    "value, expected",
    [
        ("#fff", (255, 255, 255)),
        ("#228B22", (34, 139, 34)),
        ("#228b2280", (144, 197, 144)),
        ("rgb(10, 20, 30)", (10, 20, 30)),
        ("rgba(10,20,30,0.2)", (206, 208, 210)),
        ("rgba(10,20,30,1)", (10, 20, 30)),
        ("transparent", (255, 255, 255)),
    ],
)
def test_color_formats(value: str, expected: tuple[int, int, int]) -> None:
    assert to_rgb255(value) == expected


def test_transparent_and_invalid_colors() -> None:
    assert parse_color("transparent") == (0.0, 0.0, 0.0, 0.0)
    for value in ("", "#12", "rgb(1,2)", "rgb(300,0,0)", "rgba(0,0,0,2)", "verde"):
        with pytest.raises(ValueError):
            parse_color(value)


def test_invalid_theme_color_is_rejected_by_options() -> None:
    with pytest.raises(ValidationError):
        ReportOptions(theme={"primary_color": "verde"})


def test_resolve_theme_falls_back_to_builtin_font() -> None:
    theme = resolve_theme(ReportThemeConfig(font_family="FuenteInexistente", primary_color="#000000"))

    assert theme.font_family == "Helvetica"
    assert theme.primary == (0, 0, 0)
    assert theme.text == to_rgb255(ReportThemeConfig().text_color)


def test_translucent_colors_are_flattened_over_the_page() -> None:
    theme = resolve_theme(ReportThemeConfig(panel_color="transparent", text_color="rgba(0,0,0,0.2)"))

    assert theme.panel == (255, 255, 255)
    assert theme.text == (204, 204, 204)


def test_translucent_color_over_custom_background() -> None:
    assert to_rgb255("rgba(255,255,255,0.5)", background=(0, 0, 0)) == (128, 128, 128)
