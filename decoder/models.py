"""
METAR Decoder - Data Models
Typed, immutable records produced by the group decoders and the assembler.
"""

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class GroupFamily(str, Enum):
    """Decoder family a group is routed to."""
    STATION = "station"
    TIMESTAMP = "timestamp"
    AUTO = "auto"
    WIND = "wind"
    CAVOK = "cavok"
    VISIBILITY = "visibility"
    RVR = "runway_visual_range"
    WEATHER = "weather"
    CLOUD = "cloud"
    TEMPERATURE = "temperature"
    PRESSURE = "pressure"
    SUPPLEMENTARY = "supplementary"
    TREND = "trend"
    REMARKS = "remarks"
    UNCLASSIFIED = "unclassified"


class ReportType(str, Enum):
    METAR = "METAR"
    SPECI = "SPECI"


class SpeedUnit(str, Enum):
    KNOTS = "KT"
    METERS_PER_SECOND = "MPS"


class VisibilityUnit(str, Enum):
    STATUTE_MILES = "statute_miles"  # Only used in the USA
    METERS = "meters"
    FEET = "feet"  # RVR groups carrying the FT marker


class VisibilityModifier(str, Enum):
    OR_LESS = "or_less"
    EXACTLY = "exactly"
    OR_MORE = "or_more"


class VisibilityTrend(str, Enum):
    UP = "U"
    DOWN = "D"
    NO_CHANGE = "N"
    NOT_PROVIDED = ""


class WeatherIntensity(str, Enum):
    LIGHT = "-"
    MODERATE = ""
    HEAVY = "+"


class WeatherDescriptor(str, Enum):
    NONE = ""
    SHALLOW = "MI"
    PARTIAL = "PR"
    PATCHES = "BC"
    LOW_DRIFTING = "DR"
    BLOWING = "BL"
    SHOWERS = "SH"
    THUNDERSTORM = "TS"
    FREEZING = "FZ"


class WeatherPrecipitation(str, Enum):
    DRIZZLE = "DZ"
    RAIN = "RA"
    SNOW = "SN"
    SNOW_GRAINS = "SG"
    ICE_CRYSTALS = "IC"
    ICE_PELLETS = "PL"
    HAIL = "GR"
    SMALL_HAIL_OR_SNOW_PELLETS = "GS"
    UNKNOWN = "UP"


class WeatherObscuration(str, Enum):
    NONE = ""
    MIST = "BR"
    FOG = "FG"
    SMOKE = "FU"
    VOLCANIC_ASH = "VA"
    WIDESPREAD_DUST = "DU"
    SAND = "SA"
    HAZE = "HZ"
    SPRAY = "PY"


class WeatherOther(str, Enum):
    NONE = ""
    DUST_WHIRLS = "PO"
    SQUALLS = "SQ"
    FUNNEL_CLOUD = "FC"  # Tornado / waterspout when reported heavy
    SANDSTORM = "SS"
    DUSTSTORM = "DS"


class CloudAmount(str, Enum):
    FEW = "FEW"
    SCATTERED = "SCT"
    BROKEN = "BKN"
    OVERCAST = "OVC"
    SKY_CLEAR = "SKC"
    CLEAR_BELOW_DETECTION = "CLR"
    NIL_SIGNIFICANT = "NSC"
    NIL_DETECTED = "NCD"
    VERTICAL_VISIBILITY = "VV"
    NOT_DETERMINED = "///"


class CloudType(str, Enum):
    NONE = ""
    TOWERING_CUMULUS = "TCU"
    CUMULONIMBUS = "CB"
    ALTOCUMULUS_CASTELLANUS = "ACC"


class PressureUnit(str, Enum):
    HECTOPASCALS = "Q"
    INCHES_OF_MERCURY = "A"  # hundredths, e.g. A2992 -> 2992


@dataclass(frozen=True)
class Wind:
    """
    Surface wind. `direction` is degrees from true north and is None when
    the direction is variable (VRB).
    """
    direction: Optional[int]
    variable: bool
    speed: int
    unit: SpeedUnit
    gust: Optional[int] = None
    variance_from: Optional[int] = None
    variance_to: Optional[int] = None


@dataclass(frozen=True)
class Visibility:
    """
    Prevailing visibility. Distances are kept as reported text so fractions
    like "1/4" or "1 1/2" round-trip exactly.
    """
    distance: str
    unit: VisibilityUnit
    modifier: VisibilityModifier = VisibilityModifier.EXACTLY
    to_distance: Optional[str] = None
    to_modifier: Optional[VisibilityModifier] = None
    direction: Optional[str] = None  # compass point of the prevailing group
    to_direction: Optional[str] = None  # compass point of the minimum visibility


@dataclass(frozen=True)
class RunwayVisualRange:
    runway: str
    visibility: int
    unit: VisibilityUnit
    modifier: VisibilityModifier = VisibilityModifier.EXACTLY
    to_visibility: Optional[int] = None
    to_modifier: Optional[VisibilityModifier] = None
    trend: VisibilityTrend = VisibilityTrend.NOT_PROVIDED


@dataclass(frozen=True)
class WeatherPhenomenon:
    intensity: WeatherIntensity = WeatherIntensity.MODERATE
    descriptor: WeatherDescriptor = WeatherDescriptor.NONE
    precipitation: Tuple[WeatherPrecipitation, ...] = ()
    obscuration: WeatherObscuration = WeatherObscuration.NONE
    other: WeatherOther = WeatherOther.NONE
    vicinity: bool = False


@dataclass(frozen=True)
class CloudLayer:
    amount: CloudAmount
    height: Optional[int] = None  # feet above the aerodrome
    type: CloudType = CloudType.NONE


@dataclass(frozen=True)
class Temperature:
    temperature: int
    dew_point: Optional[int]


@dataclass(frozen=True)
class Pressure:
    value: int
    unit: PressureUnit


@dataclass(frozen=True)
class Supplementary:
    recent_weather: str = ""
    wind_shear: Optional[str] = None  # runway designator or "ALL"


@dataclass(frozen=True)
class UnclassifiedGroup:
    """Advisory record of a group the decoder recognised but did not use."""
    raw_group: str
    position: int
    reason: str = "unrecognised group"


@dataclass(frozen=True)
class Report:
    """
    A fully decoded METAR/SPECI report.

    When `cavok` is set, `visibility` is None and `weather`/`clouds` are
    empty: they are "not reported", never defaulted.
    """
    station: str
    observed_at: datetime
    report_type: ReportType = ReportType.METAR
    auto: bool = False
    corrected: bool = False
    nil: bool = False
    wind: Optional[Wind] = None
    cavok: bool = False
    visibility: Optional[Visibility] = None
    runway_visual_ranges: Tuple[RunwayVisualRange, ...] = ()
    weather: Tuple[WeatherPhenomenon, ...] = ()
    clouds: Tuple[CloudLayer, ...] = ()
    temperature: Optional[Temperature] = None
    pressure: Optional[Pressure] = None
    supplementary: Supplementary = field(default_factory=Supplementary)
    trend: str = ""
    remarks: str = ""
    unclassified: Tuple[UnclassifiedGroup, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        d = asdict(self)
        d["observed_at"] = self.observed_at.isoformat()
        return _plain(d)


def _plain(value: Any) -> Any:
    """Convert enums and tuples inside an asdict() tree into JSON types."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value
