"""
Space branding.

Turns an organization's branding settings into theme variables the
front end applies on its root element.
"""

from typing import Any, Dict, Optional

COLOR_VARIABLES = {
    "primary": "--primary",
    "secondary": "--secondary",
    "accent": "--accent",
    "background": "--background",
    "text": "--foreground",
}


def hex_to_hsl(hex_color: str) -> str:
    """Convert "#rrggbb" to the "h s% l%" form used by the theme variables"""
    value = hex_color.lstrip("#")
    if len(value) != 6:
        raise ValueError(f"Invalid hex color: {hex_color}")
    r, g, b = (int(value[i : i + 2], 16) / 255 for i in (0, 2, 4))

    high = max(r, g, b)
    low = min(r, g, b)
    lightness = (high + low) / 2
    hue = saturation = 0.0

    if high != low:
        d = high - low
        saturation = d / (2 - high - low) if lightness > 0.5 else d / (high + low)
        if high == r:
            hue = ((g - b) / d + (6 if g < b else 0)) / 6
        elif high == g:
            hue = ((b - r) / d + 2) / 6
        else:
            hue = ((r - g) / d + 4) / 6

    return f"{round(hue * 360)} {round(saturation * 100)}% {round(lightness * 100)}%"


def theme_variables(settings: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """Theme variables for an organization settings blob; invalid colors are skipped"""
    if not settings:
        return {}

    variables: Dict[str, str] = {}
    brand_colors = settings.get("brand_colors") or {}
    for key, variable in COLOR_VARIABLES.items():
        color = brand_colors.get(key)
        if not color:
            continue
        try:
            variables[variable] = hex_to_hsl(color)
        except ValueError:
            continue

    background_image = settings.get("background_image_url")
    if background_image:
        variables["--background-image"] = f'url("{background_image}")'

    font = (settings.get("typography") or {}).get("font")
    if font:
        variables["font-family"] = f"{font}, sans-serif"

    return variables
