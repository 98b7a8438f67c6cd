"""
Present weather decoder.

A phenomenon is a run of two-letter codes with no separators, read left to
right in fixed precedence: intensity/vicinity, descriptor, precipitation
(zero or more), obscuration, other phenomenon.
"""

from __future__ import annotations

from typing import Dict, List, Type, TypeVar

from decoder.errors import UnparsableGroup
from decoder.models import (
    GroupFamily,
    WeatherDescriptor,
    WeatherIntensity,
    WeatherObscuration,
    WeatherOther,
    WeatherPhenomenon,
    WeatherPrecipitation,
)

VICINITY_CODE = "VC"

E = TypeVar("E")


def _code_table(enum_cls: Type[E]) -> Dict[str, E]:
    return {member.value: member for member in enum_cls if member.value}


DESCRIPTORS = _code_table(WeatherDescriptor)
PRECIPITATIONS = _code_table(WeatherPrecipitation)
OBSCURATIONS = _code_table(WeatherObscuration)
OTHERS = _code_table(WeatherOther)


def _take(group: str, pos: int, table: Dict[str, E]):
    """Longest code in `table` starting at `pos`, as (member, new_pos)."""
    for size in sorted({len(code) for code in table}, reverse=True):
        code = group[pos:pos + size]
        if code in table:
            return table[code], pos + size
    return None, pos


def decode_weather(group: str) -> WeatherPhenomenon:
    pos = 0
    intensity = WeatherIntensity.MODERATE
    if group[:1] in ("-", "+"):
        intensity = WeatherIntensity(group[0])
        pos = 1

    vicinity = group.startswith(VICINITY_CODE, pos)
    if vicinity:
        pos += len(VICINITY_CODE)

    descriptor, pos = _take(group, pos, DESCRIPTORS)

    precipitation: List[WeatherPrecipitation] = []
    while True:
        code, pos = _take(group, pos, PRECIPITATIONS)
        if code is None:
            break
        precipitation.append(code)

    obscuration, pos = _take(group, pos, OBSCURATIONS)
    other, pos = _take(group, pos, OTHERS)

    if pos != len(group):
        raise UnparsableGroup(GroupFamily.WEATHER, group, f"unknown weather code at {group[pos:]!r}")
    if descriptor is None and not precipitation and obscuration is None and other is None:
        raise UnparsableGroup(GroupFamily.WEATHER, group, "no weather phenomenon code")

    return WeatherPhenomenon(
        intensity=intensity,
        descriptor=descriptor or WeatherDescriptor.NONE,
        precipitation=tuple(precipitation),
        obscuration=obscuration or WeatherObscuration.NONE,
        other=other or WeatherOther.NONE,
        vicinity=vicinity,
    )
