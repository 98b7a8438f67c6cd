"""
Wind group decoder.

    24015G25KT 210V270  -> from 240, 15 kt gusting 25, varying 210-270
    VRB03MPS            -> variable, 3 m/s
"""

from __future__ import annotations

import re
from typing import Optional

from decoder.errors import UnparsableGroup, to_int
from decoder.models import GroupFamily, SpeedUnit, Wind

_WIND_RE = re.compile(r"^(VRB|\d{3})(\d{2,3})(?:G(\d{2,3}))?(KT|MPS)$")
_VARIANCE_RE = re.compile(r"^(\d{3})V(\d{3})$")


def decode_wind(group: str, variance_group: Optional[str] = None) -> Wind:
    """Decode a wind group plus the optional dddVddd group that followed it."""
    match = _WIND_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.WIND, group, "expected dddff[Gfmfm]KT|MPS or VRBff[Gfmfm]KT|MPS")

    source, speed, gust, unit = match.groups()
    variable = source == "VRB"
    direction = None if variable else to_int(source, GroupFamily.WIND, group)

    variance_from = variance_to = None
    if variance_group is not None:
        var_match = _VARIANCE_RE.match(variance_group)
        if not var_match:
            raise UnparsableGroup(GroupFamily.WIND, variance_group, "expected direction variance dddVddd")
        # Variance only qualifies a known mean direction
        if not variable:
            variance_from = to_int(var_match.group(1), GroupFamily.WIND, variance_group)
            variance_to = to_int(var_match.group(2), GroupFamily.WIND, variance_group)

    return Wind(
        direction=direction,
        variable=variable,
        speed=to_int(speed, GroupFamily.WIND, group),
        unit=SpeedUnit(unit),
        gust=to_int(gust, GroupFamily.WIND, group) if gust else None,
        variance_from=variance_from,
        variance_to=variance_to,
    )
