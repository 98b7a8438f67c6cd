"""
METAR Decoder
Decodes METAR/SPECI aviation weather reports into typed, immutable records.
"""

from .assembler import decode, ReportAssembler
from .errors import DecodeFault, EmptyReport, UnparsableGroup, InternalDecoderFault
from .models import Report, UnclassifiedGroup

__all__ = [
    "decode", "ReportAssembler",
    "Report", "UnclassifiedGroup",
    "DecodeFault", "EmptyReport", "UnparsableGroup", "InternalDecoderFault",
]
