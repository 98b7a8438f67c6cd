"""
Temperature/dew point and pressure decoders.

Key rules:
- "M" marks a negative value (M05 -> -5), never a minus sign.
- A missing dew point is reported as "//" and decodes to None.
- Q1013 is hectopascals; A2992 is inches of mercury in hundredths.
"""

from __future__ import annotations

import re

from decoder.errors import UnparsableGroup, to_int
from decoder.models import GroupFamily, Pressure, PressureUnit, Temperature

_TEMP_RE = re.compile(r"^(M?\d{2})/(M?\d{2}|//)?$")
_PRESSURE_RE = re.compile(r"^([QA])(\d{4})$")


def _decode_metar_signed(token: str, raw_group: str) -> int:
    if token.startswith("M"):
        return -to_int(token[1:], GroupFamily.TEMPERATURE, raw_group)
    return to_int(token, GroupFamily.TEMPERATURE, raw_group)


def decode_temperature(group: str) -> Temperature:
    match = _TEMP_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.TEMPERATURE, group, "expected [M]TT/[M]DD")

    dew_token = match.group(2)
    return Temperature(
        temperature=_decode_metar_signed(match.group(1), group),
        dew_point=_decode_metar_signed(dew_token, group) if dew_token and dew_token != "//" else None,
    )


def decode_pressure(group: str) -> Pressure:
    match = _PRESSURE_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.PRESSURE, group, "expected Qdddd or Adddd")

    return Pressure(
        value=to_int(match.group(2), GroupFamily.PRESSURE, group),
        unit=PressureUnit(match.group(1)),
    )
