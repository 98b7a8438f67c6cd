"""
METAR Decoder - Report Assembler
Drives tokenizer -> classifier -> group decoders and folds the results
into one immutable Report.

States:
    START -> TYPE_CONSUMED -> STATION_CONSUMED -> TIME_CONSUMED
          -> AUTO_CHECKED -> GROUPS_CLASSIFIED -> ASSEMBLED
    any state -> FAULTED on the first decode fault
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import List, Optional, Set, Tuple

from config import DecoderSettings, load_settings
from decoder.classifier import ClassifiedGroup, classify
from decoder.errors import DecodeFault, UnparsableGroup, to_int
from decoder.groups.clouds import decode_cloud
from decoder.groups.rvr import decode_rvr
from decoder.groups.supplementary import decode_recent_weather, decode_wind_shear, join_section
from decoder.groups.temperature import decode_pressure, decode_temperature
from decoder.groups.visibility import decode_visibility
from decoder.groups.weather import decode_weather
from decoder.groups.wind import decode_wind
from decoder.models import (
    CloudLayer,
    GroupFamily,
    Pressure,
    Report,
    ReportType,
    RunwayVisualRange,
    Supplementary,
    Temperature,
    UnclassifiedGroup,
    Visibility,
    WeatherPhenomenon,
    Wind,
)
from decoder.tokenizer import tokenize

logger = logging.getLogger("decoder.assembler")

_STATION_RE = re.compile(r"^[A-Z][A-Z0-9]{3}$")
_TIME_RE = re.compile(r"^(\d{2})(\d{2})(\d{2})Z$")

# Families suppressed once CAVOK has been reported
CAVOK_SUPPRESSED = frozenset({GroupFamily.VISIBILITY, GroupFamily.WEATHER, GroupFamily.CLOUD})


class AssemblerState(str, Enum):
    START = "start"
    TYPE_CONSUMED = "type_consumed"
    STATION_CONSUMED = "station_consumed"
    TIME_CONSUMED = "time_consumed"
    AUTO_CHECKED = "auto_checked"
    GROUPS_CLASSIFIED = "groups_classified"
    ASSEMBLED = "assembled"
    FAULTED = "faulted"


@dataclass
class _Fold:
    """In-progress fields of a single decode. Never shared between calls."""
    report_type: ReportType = ReportType.METAR
    station: str = ""
    observed_at: Optional[datetime] = None
    auto: bool = False
    corrected: bool = False
    nil: bool = False
    wind: Optional[Wind] = None
    cavok: bool = False
    visibility: Optional[Visibility] = None
    runway_visual_ranges: List[RunwayVisualRange] = field(default_factory=list)
    weather: List[WeatherPhenomenon] = field(default_factory=list)
    clouds: List[CloudLayer] = field(default_factory=list)
    temperature: Optional[Temperature] = None
    pressure: Optional[Pressure] = None
    recent_weather: List[str] = field(default_factory=list)
    wind_shear: List[str] = field(default_factory=list)
    trend: str = ""
    remarks: str = ""
    unclassified: List[UnclassifiedGroup] = field(default_factory=list)
    # (family, raw group, position) of decoded groups CAVOK may displace
    suppressible: List[Tuple[GroupFamily, str, int]] = field(default_factory=list)
    satisfied: Set[GroupFamily] = field(default_factory=set)

    def to_report(self) -> Report:
        return Report(
            station=self.station,
            observed_at=self.observed_at,
            report_type=self.report_type,
            auto=self.auto,
            corrected=self.corrected,
            nil=self.nil,
            wind=self.wind,
            cavok=self.cavok,
            visibility=self.visibility,
            runway_visual_ranges=tuple(self.runway_visual_ranges),
            weather=tuple(self.weather),
            clouds=tuple(self.clouds),
            temperature=self.temperature,
            pressure=self.pressure,
            supplementary=Supplementary(
                recent_weather=" ".join(self.recent_weather),
                wind_shear=" ".join(self.wind_shear) or None,
            ),
            trend=self.trend,
            remarks=self.remarks,
            unclassified=tuple(self.unclassified),
        )


def resolve_observation_time(day: int, hour: int, minute: int, reference: datetime) -> datetime:
    """
    Anchor a DDHHMMZ timestamp to a full UTC datetime.

    The month/year come from `reference`; a day that would lie in the future
    (beyond one day of clock skew) or does not exist in that month rolls back
    to the previous month.
    """
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    reference = reference.astimezone(timezone.utc)

    year, month = reference.year, reference.month
    for _ in range(3):
        try:
            candidate = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)
        except ValueError:
            candidate = None
        if candidate is not None and candidate <= reference + timedelta(days=1):
            return candidate
        year, month = (year - 1, 12) if month == 1 else (year, month - 1)

    raise ValueError(f"day {day:02d} {hour:02d}:{minute:02d} cannot be anchored to {reference.isoformat()}")


class ReportAssembler:
    """
    Builds a Report from raw text. One instance may be reused and shared:
    all per-decode state lives in a fresh `_Fold`.
    """

    def __init__(self, settings: Optional[DecoderSettings] = None):
        # Environment (METAR_STRICT_CAVOK, .env) is read once per assembler
        self.settings = settings or load_settings()

    def decode(self, raw_text: str, reference: Optional[datetime] = None) -> Report:
        state = AssemblerState.START
        try:
            report_type, groups = tokenize(raw_text)
            fold = _Fold(report_type=report_type)
            state = AssemblerState.TYPE_CONSUMED

            # ICAO layout: COR directly after the type marker
            offset = 0
            if groups[0] == "COR":
                fold.corrected = True
                offset = 1

            fold.station = self._decode_station(groups, offset)
            state = AssemblerState.STATION_CONSUMED

            fold.observed_at = self._decode_time(groups, reference or datetime.now(timezone.utc), offset)
            state = AssemblerState.TIME_CONSUMED

            index = self._check_modifiers(groups, offset + 2, fold)
            state = AssemblerState.AUTO_CHECKED

            if fold.nil:
                for position in range(index, len(groups)):
                    self._note_unclassified(fold, groups[position], position, "group after NIL")
            else:
                while index < len(groups):
                    classified = classify(groups, index, fold.satisfied)
                    self._fold_group(fold, classified)
                    index += len(classified.groups)
            state = AssemblerState.GROUPS_CLASSIFIED

            report = fold.to_report()
            state = AssemblerState.ASSEMBLED
            return report
        except DecodeFault as e:
            completed, state = state, AssemblerState.FAULTED
            logger.warning(f"METAR decode {state.value} after {completed.value}: {e}")
            raise

    # ------------------------------------------------------------------
    # Fixed-position groups
    # ------------------------------------------------------------------

    @staticmethod
    def _decode_station(groups: List[str], index: int = 0) -> str:
        if len(groups) <= index:
            raise UnparsableGroup(GroupFamily.STATION, "", "missing location indicator", position=index)
        station = groups[index]
        if not _STATION_RE.match(station):
            raise UnparsableGroup(GroupFamily.STATION, station, "expected 4-character ICAO location indicator", position=index)
        return station

    @staticmethod
    def _decode_time(groups: List[str], reference: datetime, offset: int = 0) -> datetime:
        position = offset + 1
        if len(groups) <= position:
            raise UnparsableGroup(GroupFamily.TIMESTAMP, "", "missing observation time", position=position)
        group = groups[position]
        match = _TIME_RE.match(group)
        if not match:
            raise UnparsableGroup(GroupFamily.TIMESTAMP, group, "expected DDHHMMZ", position=position)

        day, hour, minute = (to_int(v, GroupFamily.TIMESTAMP, group) for v in match.groups())
        try:
            return resolve_observation_time(day, hour, minute, reference)
        except ValueError as e:
            raise UnparsableGroup(GroupFamily.TIMESTAMP, group, str(e), position=position) from e

    @staticmethod
    def _check_modifiers(groups: List[str], index: int, fold: _Fold) -> int:
        """Consume AUTO / COR (either order) and NIL after the time group."""
        while index < len(groups):
            group = groups[index]
            if group == "AUTO":
                fold.auto = True
            elif group == "COR":
                fold.corrected = True
            elif group == "NIL":
                fold.nil = True
                return index + 1
            else:
                break
            index += 1
        return index

    # ------------------------------------------------------------------
    # Classified groups
    # ------------------------------------------------------------------

    def _fold_group(self, fold: _Fold, classified: ClassifiedGroup) -> None:
        family = classified.family
        groups = classified.groups

        if family == GroupFamily.UNCLASSIFIED:
            self._note_unclassified(fold, classified.raw, classified.position, classified.reason)
            return

        if fold.cavok and family in CAVOK_SUPPRESSED:
            if self.settings.strict_cavok:
                raise UnparsableGroup(family, classified.raw, "group not allowed after CAVOK", position=classified.position)
            self._note_unclassified(fold, classified.raw, classified.position, f"{family.value} group after CAVOK")
            return

        try:
            self._dispatch(fold, family, groups, classified.position)
        except DecodeFault as e:
            if e.position is None:
                e.at(classified.position)
            raise

        fold.satisfied.add(family)
        if family in CAVOK_SUPPRESSED:
            fold.suppressible.append((family, classified.raw, classified.position))

    def _dispatch(self, fold: _Fold, family: GroupFamily, groups, position: int) -> None:
        if family == GroupFamily.AUTO:
            fold.auto = True
        elif family == GroupFamily.CAVOK:
            self._apply_cavok(fold, position)
        elif family == GroupFamily.WIND:
            fold.wind = decode_wind(*groups)
        elif family == GroupFamily.VISIBILITY:
            if len(groups) == 2 and groups[1].endswith("SM"):
                fold.visibility = decode_visibility(groups[0], fraction_group=groups[1])
            elif len(groups) == 2:
                fold.visibility = decode_visibility(groups[0], minimum_group=groups[1])
            else:
                fold.visibility = decode_visibility(groups[0])
        elif family == GroupFamily.RVR:
            fold.runway_visual_ranges.append(decode_rvr(groups[0]))
        elif family == GroupFamily.WEATHER:
            fold.weather.append(decode_weather(groups[0]))
        elif family == GroupFamily.CLOUD:
            fold.clouds.append(decode_cloud(groups[0]))
        elif family == GroupFamily.TEMPERATURE:
            fold.temperature = decode_temperature(groups[0])
        elif family == GroupFamily.PRESSURE:
            fold.pressure = decode_pressure(groups[0])
        elif family == GroupFamily.SUPPLEMENTARY:
            if groups[0] == "WS":
                fold.wind_shear.append(decode_wind_shear(groups))
            else:
                fold.recent_weather.append(decode_recent_weather(groups[0]))
        elif family == GroupFamily.TREND:
            fold.trend = join_section(groups)
        elif family == GroupFamily.REMARKS:
            fold.remarks = join_section(groups)
        else:
            raise DecodeFault(f"no decoder for family {family.value}", family=family, raw_group=" ".join(groups), position=position)

    def _apply_cavok(self, fold: _Fold, position: int) -> None:
        fold.cavok = True
        displaced = bool(fold.visibility or fold.weather or fold.clouds)
        if displaced and self.settings.strict_cavok:
            raise UnparsableGroup(GroupFamily.CAVOK, "CAVOK", "CAVOK after visibility, weather or cloud groups", position=position)
        for family, raw_group, group_position in fold.suppressible:
            self._note_unclassified(fold, raw_group, group_position, f"{family.value} group before CAVOK")
        fold.suppressible.clear()
        fold.visibility = None
        fold.weather.clear()
        fold.clouds.clear()

    @staticmethod
    def _note_unclassified(fold: _Fold, raw_group: str, position: int, reason: str) -> None:
        logger.debug(f"Unclassified group {raw_group!r} at {position}: {reason}")
        fold.unclassified.append(UnclassifiedGroup(raw_group=raw_group, position=position, reason=reason))


def decode(
    raw_text: str,
    reference: Optional[datetime] = None,
    settings: Optional[DecoderSettings] = None,
) -> Report:
    """
    Decode one METAR/SPECI line into a Report.

    Args:
        raw_text: the report text, optionally prefixed METAR/SPECI and ended by "="
        reference: UTC instant used to anchor the DDHHMMZ day (default: now)
        settings: decoder policy (default: `load_settings()` from the environment)

    Raises:
        EmptyReport, UnparsableGroup, InternalDecoderFault
    """
    return ReportAssembler(settings).decode(raw_text, reference)
