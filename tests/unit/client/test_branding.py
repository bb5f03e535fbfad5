import pytest

from kairos.client.branding import hex_to_hsl, theme_variables


@pytest.mark.parametrize(
    "hex_color,expected",
    [
        ("#ff0000", "0 100% 50%"),
        ("#00ff00", "120 100% 50%"),
        ("#0000ff", "240 100% 50%"),
        ("#ffffff", "0 0% 100%"),
        ("#000000", "0 0% 0%"),
    ],
)
def test_hex_to_hsl(hex_color, expected):
    assert hex_to_hsl(hex_color) == expected


def test_hex_to_hsl_rejects_short_values():
    with pytest.raises(ValueError):
        hex_to_hsl("#fff")


def test_theme_variables_from_settings():
    settings = {
        "brand_colors": {"primary": "#ff0000", "accent": "not-a-color"},
        "background_image_url": "https://cdn.kairos.app/bg.png",
        "typography": {"font": "Inter"},
    }

    variables = theme_variables(settings)

    assert variables == {
        "--primary": "0 100% 50%",
        "--background-image": 'url("https://cdn.kairos.app/bg.png")',
        "font-family": "Inter, sans-serif",
    }


def test_theme_variables_without_settings():
    assert theme_variables(None) == {}
    assert theme_variables({}) == {}
