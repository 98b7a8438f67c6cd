"""
Prevailing visibility decoder.

Distances stay textual so "1/4" or "1 1/2" are never coerced to floats.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple

from config import COMPASS_POINTS
from decoder.errors import UnparsableGroup
from decoder.models import GroupFamily, Visibility, VisibilityModifier, VisibilityUnit

_COMPASS = "|".join(sorted(COMPASS_POINTS, key=len, reverse=True))

_METERS_RE = re.compile(rf"^([MP])?(\d{{4}})(NDV|{_COMPASS})?$")
_MILES_RE = re.compile(r"^([MP])?(\d{1,2}|\d{1,2}/\d{1,2})SM$")
_WHOLE_MILES_RE = re.compile(r"^\d$")

_MODIFIERS = {
    "M": VisibilityModifier.OR_LESS,
    "P": VisibilityModifier.OR_MORE,
    None: VisibilityModifier.EXACTLY,
}


def _decode_meters(group: str) -> Tuple[str, VisibilityModifier, Optional[str]]:
    match = _METERS_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.VISIBILITY, group, "expected 4-digit distance in meters")
    prefix, distance, suffix = match.groups()
    direction = suffix if suffix and suffix != "NDV" else None
    return distance, _MODIFIERS[prefix], direction


def decode_visibility(
    group: str,
    fraction_group: Optional[str] = None,
    minimum_group: Optional[str] = None,
) -> Visibility:
    """
    Decode a visibility group.

    - `fraction_group`: the "1/2SM" part when `group` is a whole-mile digit ("1 1/2SM")
    - `minimum_group`: a following directional minimum such as "2000SW"
    """
    if fraction_group is not None:
        if not _WHOLE_MILES_RE.match(group):
            raise UnparsableGroup(GroupFamily.VISIBILITY, group, "expected whole statute miles before fraction")
        match = _MILES_RE.match(fraction_group)
        if not match or match.group(1) or "/" not in match.group(2):
            raise UnparsableGroup(GroupFamily.VISIBILITY, fraction_group, "expected fractional statute miles")
        return Visibility(
            distance=f"{group} {match.group(2)}",
            unit=VisibilityUnit.STATUTE_MILES,
        )

    if group.endswith("SM"):
        match = _MILES_RE.match(group)
        if not match:
            raise UnparsableGroup(GroupFamily.VISIBILITY, group, "expected [M|P]n[/d]SM")
        return Visibility(
            distance=match.group(2),
            unit=VisibilityUnit.STATUTE_MILES,
            modifier=_MODIFIERS[match.group(1)],
        )

    distance, modifier, direction = _decode_meters(group)
    if minimum_group is None:
        return Visibility(
            distance=distance,
            unit=VisibilityUnit.METERS,
            modifier=modifier,
            direction=direction,
        )

    to_distance, to_modifier, to_direction = _decode_meters(minimum_group)
    return Visibility(
        distance=distance,
        unit=VisibilityUnit.METERS,
        modifier=modifier,
        to_distance=to_distance,
        to_modifier=to_modifier,
        direction=direction,
        to_direction=to_direction,
    )
