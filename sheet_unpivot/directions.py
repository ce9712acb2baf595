"""
Compass directions for header association.

A direction names where a header sits relative to the data cells it
governs.  ``N`` means "the header is directly above, in the same column";
``NNW`` means "above, and at or to the left of the column" (a header
spanning several columns, written in the left-most one).

Families:
  cardinal   N, S, E, W          -- same line, nearest header
  compound   NNW, NNE, SSW, SSE,  -- one axis strict, the other relaxed
             WNW, WSW, ENE, ESE
  proximity  ABOVE, BELOW,        -- nearest header in the half-plane.
             LEFT, RIGHT             Best-effort only: ignores region
                                     boundaries, so prefer a compound
                                     direction or ``justify()`` whenever
                                     headers are not closest by distance.

Long-form aliases (``up``, ``up-left``, ``left-up``, ``up-ish``, ...) are
accepted by ``Direction.parse()``.
"""

from __future__ import annotations

from enum import Enum


class Direction(str, Enum):
    N = "N"
    S = "S"
    E = "E"
    W = "W"
    NNW = "NNW"
    NNE = "NNE"
    SSW = "SSW"
    SSE = "SSE"
    WNW = "WNW"
    WSW = "WSW"
    ENE = "ENE"
    ESE = "ESE"
    ABOVE = "ABOVE"
    BELOW = "BELOW"
    LEFT = "LEFT"
    RIGHT = "RIGHT"

    @classmethod
    def parse(cls, value: str | Direction) -> Direction:
        """Parse a direction name or alias.

        Exact compass names win, then aliases (case-insensitive), then
        compass names in any case.  So ``"LEFT"`` is the proximity
        direction while ``"left"`` is the alias for ``W``.

        Raises:
            ValueError: If *value* is not a known direction.
        """
        if isinstance(value, Direction):
            return value
        key = str(value).strip()
        if key in cls.__members__:
            return cls[key]
        alias = _ALIASES.get(key.lower())
        if alias is None and key.upper() in cls.__members__:
            return cls[key.upper()]
        if alias is None:
            raise ValueError(
                f"Unknown direction {value!r}. Expected one of "
                f"{[d.value for d in cls]} or an alias {sorted(_ALIASES)}"
            )
        return alias

    @property
    def is_cardinal(self) -> bool:
        return self in _CARDINAL

    @property
    def is_compound(self) -> bool:
        return self in _COMPOUND

    @property
    def is_proximity(self) -> bool:
        return self in _PROXIMITY

    @property
    def side(self) -> str:
        """Which side of the data the headers sit on: ``"N"``, ``"S"``, ``"W"`` or ``"E"``.

        This is the first compass letter; it decides which extreme
        row/column ``behead()`` peels off.
        """
        return _SIDES[self]


_CARDINAL = frozenset({Direction.N, Direction.S, Direction.E, Direction.W})
_COMPOUND = frozenset({
    Direction.NNW, Direction.NNE, Direction.SSW, Direction.SSE,
    Direction.WNW, Direction.WSW, Direction.ENE, Direction.ESE,
})
_PROXIMITY = frozenset({Direction.ABOVE, Direction.BELOW, Direction.LEFT, Direction.RIGHT})

_SIDES: dict[Direction, str] = {
    Direction.ABOVE: "N",
    Direction.BELOW: "S",
    Direction.LEFT: "W",
    Direction.RIGHT: "E",
}
_SIDES.update({d: d.value[0] for d in Direction if d not in _SIDES})

_ALIASES: dict[str, Direction] = {
    "up": Direction.N,
    "down": Direction.S,
    "left": Direction.W,
    "right": Direction.E,
    "up-left": Direction.NNW,
    "up-right": Direction.NNE,
    "down-left": Direction.SSW,
    "down-right": Direction.SSE,
    "left-up": Direction.WNW,
    "left-down": Direction.WSW,
    "right-up": Direction.ENE,
    "right-down": Direction.ESE,
    "up-ish": Direction.ABOVE,
    "down-ish": Direction.BELOW,
    "left-ish": Direction.LEFT,
    "right-ish": Direction.RIGHT,
}
