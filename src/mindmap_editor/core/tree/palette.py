"""Color tokens for nodes and annotations."""

import re

# Named node colors. A node's ``color`` holds either one of these tokens or a
# literal ``#rgb`` / ``#rrggbb`` value.
NEON_COLORS: dict[str, str] = {
    "purple": "#a855f7",
    "blue": "#3b82f6",
    "green": "#22c55e",
    "red": "#ef4444",
    "yellow": "#eab308",
    "cyan": "#06b6d4",
}

# Colors used when a node has no explicit color, indexed by depth.
DEPTH_COLORS: tuple[str, ...] = ("purple", "#ec4899", "blue", "green", "yellow")

POSTIT_COLORS: dict[str, str] = {
    "yellow": "#fef3c7",
    "blue": "#dbeafe",
    "green": "#dcfce7",
    "pink": "#fce7f3",
    "purple": "#f3e8ff",
}
DEFAULT_POSTIT_COLOR = POSTIT_COLORS["yellow"]

_HEX_RE = re.compile(r"^#([A-Fa-f0-9]{3}){1,2}$")


def is_literal_color(value: str) -> bool:
    return bool(_HEX_RE.match(value))


def is_valid_color(value: str) -> bool:
    """True for palette tokens and literal hex colors."""
    return value in NEON_COLORS or is_literal_color(value)


def effective_color(color: str | None, depth: int) -> str:
    """Resolve a node color to a literal value, inheriting by depth when absent."""
    if color is None:
        color = DEPTH_COLORS[min(depth, len(DEPTH_COLORS) - 1)]
    return NEON_COLORS.get(color, color)
