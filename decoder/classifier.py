"""
METAR Decoder - Group Classifier
Routes each group to a decoder family by its shape, not its position.

Shapes are looser than the decoders' grammars: a group
that looks like wind but has bad digits ("24HKT") is classified as
wind so the wind decoder can reject it with a precise fault.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import AbstractSet, Sequence, Tuple

from config import COMPASS_POINTS, REMARKS_KEYWORD, TREND_KEYWORDS
from decoder.groups.clouds import CLEAR_AMOUNTS
from decoder.groups.weather import DESCRIPTORS, OBSCURATIONS, OTHERS, PRECIPITATIONS, VICINITY_CODE
from decoder.models import GroupFamily

_COMPASS = "|".join(sorted(COMPASS_POINTS, key=len, reverse=True))


def _alternation(codes) -> str:
    return "(?:" + "|".join(sorted(codes)) + ")"


_MISSING_RE = re.compile(r"^/{2,}$")
_WIND_RE = re.compile(r"^(?:VRB|\d)[0-9A-Z]{0,10}?(?:KT|MPS)$")
_VARIANCE_RE = re.compile(r"^\d{3}V\d{3}$")
_RUNWAY_STATE_RE = re.compile(r"^R\d{2}[LCR]?/(?:\d{6}|CLRD\d{2}|[0-9/]{6})$")
_RVR_RE = re.compile(r"^R\d{2}[LCR]?/[MP]?\d{1,4}[0-9A-Z/]{0,12}$")
_VIS_MILES_RE = re.compile(r"^[0-9MP/]{1,6}SM$")
_VIS_WHOLE_RE = re.compile(r"^\d$")
_VIS_FRACTION_RE = re.compile(r"^\d{1,2}/\d{1,2}SM$")
_VIS_METERS_RE = re.compile(rf"^[MP]?\d{{4}}(?:NDV|{_COMPASS})?$")
_VIS_MINIMUM_RE = re.compile(rf"^\d{{4}}(?:{_COMPASS})$")
_RECENT_RE = re.compile(r"^RE[A-Z]{2,8}$")
_CLOUD_RE = re.compile(r"^(?:FEW|SCT|BKN|OVC|VV|///)[0-9A-Z/]{0,8}$")
_WEATHER_RE = re.compile(
    r"^[-+]?(?:" + VICINITY_CODE + r")?"
    + _alternation(DESCRIPTORS) + "?"
    + _alternation(PRECIPITATIONS) + "{0,4}"
    + _alternation(OBSCURATIONS) + "?"
    + _alternation(OTHERS) + "?$"
)
_TEMPERATURE_RE = re.compile(r"^M?\d{1,3}/(?:M?\d{1,3}|//)?$")
_PRESSURE_RE = re.compile(r"^[QA]\d{3,5}$")

# Families that appear at most once per report
SINGLE_FAMILIES = frozenset({
    GroupFamily.WIND,
    GroupFamily.CAVOK,
    GroupFamily.VISIBILITY,
    GroupFamily.TEMPERATURE,
    GroupFamily.PRESSURE,
})


@dataclass(frozen=True)
class ClassifiedGroup:
    """A tagged group: its family, the raw group(s) it spans and where it starts."""
    family: GroupFamily
    groups: Tuple[str, ...]
    position: int
    reason: str = ""

    @property
    def raw(self) -> str:
        return " ".join(self.groups)


def _is_weather(group: str) -> bool:
    if not _WEATHER_RE.match(group):
        return False
    # Intensity or vicinity alone is not a phenomenon
    return group.lstrip("-+").replace(VICINITY_CODE, "", 1) != ""


def _classify_shape(groups: Sequence[str], index: int) -> Tuple[GroupFamily, int]:
    """Return (family, number of groups spanned)."""
    group = groups[index]
    following = groups[index + 1] if index + 1 < len(groups) else None

    if group == REMARKS_KEYWORD:
        return GroupFamily.REMARKS, len(groups) - index

    if group in TREND_KEYWORDS:
        span = 1
        while index + span < len(groups) and groups[index + span] != REMARKS_KEYWORD:
            span += 1
        return GroupFamily.TREND, span

    if _MISSING_RE.match(group):
        return GroupFamily.UNCLASSIFIED, 1

    if group == "CAVOK":
        return GroupFamily.CAVOK, 1

    if group == "AUTO":
        return GroupFamily.AUTO, 1

    if _WIND_RE.match(group):
        if following is not None and _VARIANCE_RE.match(following):
            return GroupFamily.WIND, 2
        return GroupFamily.WIND, 1

    if _RUNWAY_STATE_RE.match(group):
        return GroupFamily.UNCLASSIFIED, 1
    if _RVR_RE.match(group):
        return GroupFamily.RVR, 1

    if _VIS_MILES_RE.match(group):
        return GroupFamily.VISIBILITY, 1
    if _VIS_WHOLE_RE.match(group) and following is not None and _VIS_FRACTION_RE.match(following):
        return GroupFamily.VISIBILITY, 2
    if _VIS_METERS_RE.match(group):
        if following is not None and _VIS_MINIMUM_RE.match(following):
            return GroupFamily.VISIBILITY, 2
        return GroupFamily.VISIBILITY, 1

    if _RECENT_RE.match(group):
        return GroupFamily.SUPPLEMENTARY, 1

    if group == "WS":
        if groups[index + 1:index + 3] == ["ALL", "RWY"]:
            return GroupFamily.SUPPLEMENTARY, 3
        return GroupFamily.SUPPLEMENTARY, 2 if following is not None else 1

    if group in CLEAR_AMOUNTS or _CLOUD_RE.match(group):
        return GroupFamily.CLOUD, 1

    if _is_weather(group):
        return GroupFamily.WEATHER, 1

    if _TEMPERATURE_RE.match(group):
        return GroupFamily.TEMPERATURE, 1

    if _PRESSURE_RE.match(group):
        return GroupFamily.PRESSURE, 1

    return GroupFamily.UNCLASSIFIED, 1


def classify(
    groups: Sequence[str],
    index: int,
    satisfied: AbstractSet[GroupFamily] = frozenset(),
) -> ClassifiedGroup:
    """
    Classify `groups[index]` (plus any groups it consumes).

    `satisfied` holds the families already decoded in this report; a second
    group of a single-occurrence family is returned as UNCLASSIFIED.
    """
    groups = list(groups)
    family, span = _classify_shape(groups, index)
    spanned = tuple(groups[index:index + span])

    if family == GroupFamily.UNCLASSIFIED:
        reason = "missing data marker" if _MISSING_RE.match(groups[index]) else "unrecognised group"
        if _VARIANCE_RE.match(groups[index]):
            reason = "direction variance not directly after wind"
        elif _RUNWAY_STATE_RE.match(groups[index]):
            reason = "runway state group"
        return ClassifiedGroup(family, spanned, index, reason)

    if family in SINGLE_FAMILIES and family in satisfied:
        return ClassifiedGroup(GroupFamily.UNCLASSIFIED, spanned, index, f"repeated {family.value} group")

    return ClassifiedGroup(family, spanned, index)
