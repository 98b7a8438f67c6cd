"""
Supplementary groups: recent weather (RE..), wind shear (WS ..) and the
verbatim trend/remarks sections.
"""

from __future__ import annotations

import re
from typing import Sequence

from config import REMARKS_KEYWORD
from decoder.errors import UnparsableGroup
from decoder.groups.weather import decode_weather
from decoder.models import GroupFamily

_RECENT_RE = re.compile(r"^RE([A-Z]{2,8})$")
_RUNWAY_RE = re.compile(r"^(?:R|RWY)(\d{2}[LCR]?)$")


def decode_recent_weather(group: str) -> str:
    """RETSRA -> "TSRA". The code must be valid present-weather vocabulary."""
    match = _RECENT_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.SUPPLEMENTARY, group, "expected RE followed by weather codes")
    code = match.group(1)
    try:
        decode_weather(code)
    except UnparsableGroup as e:
        raise UnparsableGroup(GroupFamily.SUPPLEMENTARY, group, f"recent weather: {e.reason}") from e
    return code


def decode_wind_shear(groups: Sequence[str]) -> str:
    """
    WS R24 / WS RWY24L -> runway designator; WS ALL RWY -> "ALL".
    """
    raw = " ".join(groups)
    if len(groups) < 2 or groups[0] != "WS":
        raise UnparsableGroup(GroupFamily.SUPPLEMENTARY, raw, "expected WS followed by a runway")

    if list(groups[1:]) == ["ALL", "RWY"]:
        return "ALL"

    match = _RUNWAY_RE.match(groups[1]) if len(groups) == 2 else None
    if not match:
        raise UnparsableGroup(GroupFamily.SUPPLEMENTARY, raw, "expected WS Rdd[LCR], WS RWYdd[LCR] or WS ALL RWY")
    return match.group(1)


def join_section(groups: Sequence[str]) -> str:
    """Trend and remarks sections are kept verbatim, minus the RMK keyword."""
    if groups and groups[0] == REMARKS_KEYWORD:
        groups = groups[1:]
    return " ".join(groups)
