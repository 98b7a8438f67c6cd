from datetime import datetime, timezone
import logging
from pathlib import Path
import sys

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from config import DecoderSettings
from decoder import decode, ReportAssembler
from decoder.assembler import resolve_observation_time
from decoder.errors import EmptyReport, UnparsableGroup
from decoder.models import (
    CloudAmount,
    CloudType,
    GroupFamily,
    PressureUnit,
    ReportType,
    SpeedUnit,
    VisibilityModifier,
    VisibilityUnit,
    WeatherDescriptor,
    WeatherIntensity,
    WeatherPrecipitation,
)

REFERENCE = datetime(2024, 1, 21, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def permissive_environment(monkeypatch):
    monkeypatch.delenv("METAR_STRICT_CAVOK", raising=False)


def test_decode_us_metar():
    raw = "METAR KLGA 210051Z 03013G21KT 7SM -DZ OVC005 02/01 A2965 RMK AO2 SLP040 P0000 T00220006 $"
    report = decode(raw, reference=REFERENCE)

    assert report.report_type == ReportType.METAR
    assert report.station == "KLGA"
    assert report.observed_at == datetime(2024, 1, 21, 0, 51, tzinfo=timezone.utc)
    assert report.auto is False
    assert report.wind.direction == 30
    assert report.wind.speed == 13
    assert report.wind.gust == 21
    assert report.wind.unit == SpeedUnit.KNOTS
    assert report.visibility.distance == "7"
    assert report.visibility.unit == VisibilityUnit.STATUTE_MILES
    assert len(report.weather) == 1
    assert report.weather[0].intensity == WeatherIntensity.LIGHT
    assert report.weather[0].precipitation == (WeatherPrecipitation.DRIZZLE,)
    assert report.clouds[0].amount == CloudAmount.OVERCAST
    assert report.clouds[0].height == 500
    assert report.temperature.temperature == 2
    assert report.temperature.dew_point == 1
    assert report.pressure.value == 2965
    assert report.pressure.unit == PressureUnit.INCHES_OF_MERCURY
    assert report.remarks == "AO2 SLP040 P0000 T00220006 $"
    assert report.unclassified == ()


def test_decode_icao_speci_with_rvr_and_variance():
    raw = (
        "SPECI EDDF 210620Z 24008KT 210V270 0600 R25L/0800V1200U R25R/P1500 "
        "+SHRASN BCFG FEW008 BKN015CB M01/M03 Q0998 RERA WS R25L TEMPO 0400 FG="
    )
    report = decode(raw, reference=REFERENCE)

    assert report.report_type == ReportType.SPECI
    assert report.wind.variance_from == 210
    assert report.wind.variance_to == 270
    assert report.visibility.distance == "0600"
    assert report.visibility.unit == VisibilityUnit.METERS
    assert [r.runway for r in report.runway_visual_ranges] == ["25L", "25R"]
    assert report.runway_visual_ranges[1].modifier == VisibilityModifier.OR_MORE
    assert report.weather[0].descriptor == WeatherDescriptor.SHOWERS
    assert report.weather[0].precipitation == (WeatherPrecipitation.RAIN, WeatherPrecipitation.SNOW)
    assert report.weather[1].descriptor == WeatherDescriptor.PATCHES
    assert report.clouds[1].type == CloudType.CUMULONIMBUS
    assert report.temperature.temperature == -1
    assert report.temperature.dew_point == -3
    assert report.pressure.unit == PressureUnit.HECTOPASCALS
    assert report.supplementary.recent_weather == "RA"
    assert report.supplementary.wind_shear == "25L"
    assert report.trend == "TEMPO 0400 FG"


def test_auto_and_corrected_flags():
    report = decode("KJFK 211251Z COR AUTO VRB03KT 10SM CLR 20/15 A3010", reference=REFERENCE)

    assert report.auto is True
    assert report.corrected is True
    assert report.wind.variable is True
    assert report.clouds[0].amount == CloudAmount.CLEAR_BELOW_DETECTION


def test_whole_and_fraction_visibility():
    report = decode("KBOS 211254Z 09012KT 1 1/2SM BR OVC004 05/04 A2990", reference=REFERENCE)

    assert report.visibility.distance == "1 1/2"
    assert report.weather[0].descriptor == WeatherDescriptor.NONE


def test_three_cloud_layers_keep_report_order():
    report = decode("KSEA 211756Z 18012KT 10SM FEW030 BKN120 SCT060 14/10 A2985", reference=REFERENCE)

    assert len(report.clouds) == 3
    assert [c.height for c in report.clouds] == [3000, 12000, 6000]
    assert [c.amount for c in report.clouds] == [CloudAmount.FEW, CloudAmount.BROKEN, CloudAmount.SCATTERED]


def test_cavok_suppresses_later_shapes():
    report = decode("LFPG 211230Z 27010KT CAVOK 9999 -RA BKN030 18/09 Q1021", reference=REFERENCE)

    assert report.cavok is True
    assert report.visibility is None
    assert report.weather == ()
    assert report.clouds == ()
    assert report.temperature.temperature == 18
    assert [u.raw_group for u in report.unclassified] == ["9999", "-RA", "BKN030"]
    assert all("CAVOK" in u.reason for u in report.unclassified)


def test_cavok_discards_earlier_groups_as_advisories():
    report = decode("LFPG 211230Z 27010KT 9999 -RA BKN030 CAVOK 18/09 Q1021", reference=REFERENCE)

    assert report.cavok is True
    assert report.visibility is None
    assert report.weather == ()
    assert report.clouds == ()
    assert [(u.raw_group, u.position, u.reason) for u in report.unclassified] == [
        ("9999", 3, "visibility group before CAVOK"),
        ("-RA", 4, "weather group before CAVOK"),
        ("BKN030", 5, "cloud group before CAVOK"),
    ]


def test_strict_cavok_rejects_later_shapes():
    settings = DecoderSettings(strict_cavok=True)

    with pytest.raises(UnparsableGroup) as excinfo:
        decode("LFPG 211230Z 27010KT CAVOK BKN030 18/09 Q1021", reference=REFERENCE, settings=settings)

    assert excinfo.value.family == GroupFamily.CLOUD
    assert excinfo.value.raw_group == "BKN030"
    assert excinfo.value.position == 4


def test_malformed_wind_aborts_with_position():
    with pytest.raises(UnparsableGroup) as excinfo:
        decode("KJFK 211251Z 24HKT 10SM CLR 20/15 A3010", reference=REFERENCE)

    assert excinfo.value.family == GroupFamily.WIND
    assert excinfo.value.raw_group == "24HKT"
    assert excinfo.value.position == 2


def test_unclassified_groups_are_advisory():
    report = decode("EGLL 211220Z AUTO 24008KT //// R27L/290050 NCD 09/07 Q1017 NOSIG", reference=REFERENCE)

    assert report.auto is True
    assert report.visibility is None
    assert [(u.raw_group, u.position) for u in report.unclassified] == [("////", 4), ("R27L/290050", 5)]
    assert report.clouds[0].amount == CloudAmount.NIL_DETECTED
    assert report.trend == "NOSIG"


def test_nil_report():
    report = decode("METAR EGLL 211450Z NIL=", reference=REFERENCE)

    assert report.nil is True
    assert report.wind is None
    assert report.unclassified == ()


@pytest.mark.parametrize("raw", ["", "METAR", "  SPECI  "])
def test_empty_report(raw):
    with pytest.raises(EmptyReport):
        decode(raw, reference=REFERENCE)


@pytest.mark.parametrize(
    "raw, family, position",
    [
        ("K1 211251Z 24010KT", GroupFamily.STATION, 0),
        ("KJFK", GroupFamily.TIMESTAMP, 1),
        ("KJFK 2112Z 24010KT", GroupFamily.TIMESTAMP, 1),
        ("KJFK 211275Z 24010KT", GroupFamily.TIMESTAMP, 1),
    ],
)
def test_fixed_groups_are_mandatory(raw, family, position):
    with pytest.raises(UnparsableGroup) as excinfo:
        decode(raw, reference=REFERENCE)

    assert excinfo.value.family == family
    assert excinfo.value.position == position


def test_decoding_is_idempotent():
    raw = "SPECI KXYZ 121455Z 06005KT 10SM FEW040 02/01 A3000 RMK AO2"
    assembler = ReportAssembler()

    assert assembler.decode(raw, REFERENCE) == assembler.decode(raw, REFERENCE)
    assert decode(raw, reference=REFERENCE) == decode(raw, reference=REFERENCE)


def test_to_dict_is_plain():
    report = decode("KJFK 211251Z 24010KT 10SM FEW040 20/15 A3010", reference=REFERENCE)
    d = report.to_dict()

    assert d["observed_at"] == "2024-01-21T12:51:00+00:00"
    assert d["report_type"] == "METAR"
    assert d["wind"]["unit"] == "KT"
    assert d["clouds"] == [{"amount": "FEW", "height": 4000, "type": ""}]


def test_observation_day_in_future_rolls_back_a_month():
    reference = datetime(2024, 3, 1, 0, 30, tzinfo=timezone.utc)

    assert resolve_observation_time(29, 23, 50, reference) == datetime(2024, 2, 29, 23, 50, tzinfo=timezone.utc)
    assert resolve_observation_time(31, 12, 0, reference) == datetime(2024, 1, 31, 12, 0, tzinfo=timezone.utc)
    assert resolve_observation_time(1, 0, 20, reference) == datetime(2024, 3, 1, 0, 20, tzinfo=timezone.utc)


def test_year_boundary():
    reference = datetime(2024, 1, 1, 0, 10, tzinfo=timezone.utc)

    assert resolve_observation_time(31, 23, 50, reference) == datetime(2023, 12, 31, 23, 50, tzinfo=timezone.utc)


def test_strict_cavok_from_environment(monkeypatch):
    monkeypatch.setenv("METAR_STRICT_CAVOK", "1")

    with pytest.raises(UnparsableGroup) as excinfo:
        decode("LFPG 211230Z 27010KT CAVOK BKN030 18/09 Q1021", reference=REFERENCE)

    assert excinfo.value.family == GroupFamily.CLOUD
    assert excinfo.value.raw_group == "BKN030"


def test_explicit_settings_override_environment(monkeypatch):
    monkeypatch.setenv("METAR_STRICT_CAVOK", "1")

    report = decode(
        "LFPG 211230Z 27010KT CAVOK BKN030 18/09 Q1021",
        reference=REFERENCE,
        settings=DecoderSettings(strict_cavok=False),
    )

    assert report.unclassified[0].reason == "cloud group after CAVOK"


def test_icao_correction_follows_type_marker():
    report = decode("METAR COR LFPG 211230Z 27010KT 9999 FEW030 18/09 Q1021", reference=REFERENCE)

    assert report.corrected is True
    assert report.station == "LFPG"
    assert report.observed_at == datetime(2024, 1, 21, 12, 30, tzinfo=timezone.utc)
    assert report.visibility.distance == "9999"
    assert report.clouds[0].height == 3000
    assert report.unclassified == ()


def test_icao_correction_shifts_fault_positions():
    with pytest.raises(UnparsableGroup) as excinfo:
        decode("METAR COR LFPG 2112Z 27010KT", reference=REFERENCE)

    assert excinfo.value.family == GroupFamily.TIMESTAMP
    assert excinfo.value.position == 2


def test_fault_is_logged_with_faulted_state(caplog):
    with caplog.at_level(logging.WARNING, logger="decoder.assembler"):
        with pytest.raises(UnparsableGroup):
            decode("KJFK 2112Z 24010KT", reference=REFERENCE)

    messages = [r.getMessage() for r in caplog.records]
    assert any("faulted after station_consumed" in m for m in messages)


def test_convective_cloud_without_amount_or_height():
    report = decode("KJFK 211251Z AUTO 24010KT 10SM ///CB 20/15 A3010", reference=REFERENCE)

    assert report.clouds[0].amount == CloudAmount.NOT_DETERMINED
    assert report.clouds[0].height is None
    assert report.clouds[0].type == CloudType.CUMULONIMBUS
