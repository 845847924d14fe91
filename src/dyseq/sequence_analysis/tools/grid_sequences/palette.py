from __future__ import annotations

from types import MappingProxyType

from .labeling import MISSING_STATE

# Rich colour names; rows of the grid share a hue, columns darken.
STATE_COLOURS = MappingProxyType(
    {
        "A": "light_sky_blue1",
        "B": "sky_blue2",
        "C": "deep_sky_blue3",
        "D": "dodger_blue3",
        "E": "pale_green1",
        "F": "light_green",
        "G": "green3",
        "H": "dark_green",
        "I": "light_goldenrod1",
        "J": "gold1",
        "K": "orange3",
        "L": "dark_orange3",
        "M": "light_pink1",
        "N": "hot_pink2",
        "O": "red3",
        "P": "dark_red",
        MISSING_STATE: "grey50",
    }
)


def state_colour(symbol: str) -> str:
    """Return the display colour for a state, grey for unknown symbols."""

    return STATE_COLOURS.get(symbol, "grey50")
