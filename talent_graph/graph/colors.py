"""
talent_graph/graph/colors.py — Colour tokens and emphasis adjustments.

Palette values match the renderer's legend so 2D and 3D views agree. Colours
travel as '#rrggbb' tokens; fading appends an alpha byte ('#rrggbbaa').
"""

import colorsys
import logging

logger = logging.getLogger(__name__)

# ── Palette ───────────────────────────────────────────────────────────────────
NODE_COLORS = {
    "company": "#8b5cf6",
    "authority": "#00d4ff",
    "jobSeeker": "#f97316",
    "skill": "#10b981",
    "position": "#ef4444",
}
DEFAULT_NODE_COLOR = "#6366f1"

LINK_COLORS = {
    "employment": "#8b5cf6",
    "hiring": "#00d4ff",
    "offers": "#8b5cf6",
    "requires": "#f97316",
    "has": "#f97316",
    "preference": "#10b981",
    "match": "#ef4444",
}
DEFAULT_LINK_COLOR = "#6b7280"


def node_color(node_type: str) -> str:
    return NODE_COLORS.get(node_type, DEFAULT_NODE_COLOR)


def link_color(link_type: str) -> str:
    return LINK_COLORS.get(link_type, DEFAULT_LINK_COLOR)


def _parse_hex(color: str) -> tuple[int, int, int] | None:
    if not isinstance(color, str) or not color.startswith("#"):
        return None
    digits = color[1:7]
    if len(digits) != 6:
        return None
    try:
        return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)
    except ValueError:
        return None


def adjust_color_opacity(color: str, opacity: float) -> str:
    """
    Replace (or add) the alpha byte of a hex colour.

    Non-hex tokens ('steelblue', 'rgb(...)') are returned unchanged.
    """
    rgb = _parse_hex(color)
    if rgb is None:
        return color
    alpha = round(min(max(opacity, 0.0), 1.0) * 255)
    return "#{:02x}{:02x}{:02x}{:02x}".format(*rgb, alpha)


def adjust_color_saturation(color: str, multiplier: float) -> str:
    """
    Scale HLS saturation (clamped to 1.0) and lift lightness slightly.

    Used to make the root node and its links stand out. Any alpha suffix is
    dropped; non-hex tokens are returned unchanged.
    """
    rgb = _parse_hex(color)
    if rgb is None:
        return color
    h, l, s = colorsys.rgb_to_hls(*(c / 255.0 for c in rgb))
    s = min(1.0, s * multiplier)
    l = min(0.9, l * (1.0 + (multiplier - 1.0) / 4.0))
    r, g, b = colorsys.hls_to_rgb(h, l, s)
    return "#{:02x}{:02x}{:02x}".format(round(r * 255), round(g * 255), round(b * 255))
