from __future__ import annotations

from typing import List, Optional, Tuple

from decoder.errors import EmptyReport
from decoder.models import ReportType


def normalize_report_type(token: Optional[str]) -> Optional[ReportType]:
    """
    Map a leading token to a report type:
    - "SPECI" -> ReportType.SPECI
    - "METAR" -> ReportType.METAR
    - anything else -> None (token is not a type marker)

    Matching is case-sensitive: feeds always send the marker in upper case.
    """
    if token == "SPECI":
        return ReportType.SPECI
    if token == "METAR":
        return ReportType.METAR
    return None


def tokenize(raw_text: Optional[str]) -> Tuple[ReportType, List[str]]:
    """
    Split a raw report line into its whitespace-delimited groups.

    Returns (report_type, groups). The leading METAR/SPECI marker, if any,
    is removed; its absence defaults to METAR. A trailing "=" end-of-message
    marker is dropped.
    """
    raw = (raw_text or "").strip()
    if raw.endswith("="):
        raw = raw[:-1].rstrip()

    groups = raw.split()
    report_type = ReportType.METAR
    if groups:
        detected = normalize_report_type(groups[0])
        if detected is not None:
            report_type = detected
            groups = groups[1:]

    if not groups:
        raise EmptyReport()

    return report_type, groups
