"""
Runway visual range decoder.

    R24/P2000N       -> runway 24, 2000 m or more, no change
    R28L/1000V1600FT -> runway 28L, 1000 to 1600 ft
"""

from __future__ import annotations

import re

from config import DEFAULT_RVR_UNIT
from decoder.errors import UnparsableGroup, to_int
from decoder.models import (
    GroupFamily,
    RunwayVisualRange,
    VisibilityModifier,
    VisibilityTrend,
    VisibilityUnit,
)

_RVR_RE = re.compile(
    r"^R(\d{2}[LCR]?)/([MP])?(\d{4})(?:V([MP])?(\d{4}))?(FT)?(?:/?([UDN]))?$"
)

_MODIFIERS = {
    "M": VisibilityModifier.OR_LESS,
    "P": VisibilityModifier.OR_MORE,
    None: VisibilityModifier.EXACTLY,
}


def decode_rvr(group: str) -> RunwayVisualRange:
    match = _RVR_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.RVR, group, "expected Rdd[LCR]/[M|P]dddd[V[M|P]dddd][FT][U|D|N]")

    runway, prefix, value, to_prefix, to_value, feet, trend = match.groups()
    unit = VisibilityUnit.FEET if feet else VisibilityUnit(DEFAULT_RVR_UNIT)

    return RunwayVisualRange(
        runway=runway,
        visibility=to_int(value, GroupFamily.RVR, group),
        unit=unit,
        modifier=_MODIFIERS[prefix],
        to_visibility=to_int(to_value, GroupFamily.RVR, group) if to_value else None,
        to_modifier=_MODIFIERS[to_prefix] if to_value else None,
        trend=VisibilityTrend(trend) if trend else VisibilityTrend.NOT_PROVIDED,
    )
