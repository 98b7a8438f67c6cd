"""
Per-family group decoders. Each is a pure function of its group string(s)
returning a typed value or raising a DecodeFault.
"""

from .clouds import decode_cloud
from .rvr import decode_rvr
from .supplementary import decode_recent_weather, decode_wind_shear
from .temperature import decode_temperature, decode_pressure
from .visibility import decode_visibility
from .weather import decode_weather
from .wind import decode_wind

__all__ = [
    "decode_wind", "decode_visibility", "decode_rvr", "decode_weather",
    "decode_cloud", "decode_temperature", "decode_pressure",
    "decode_recent_weather", "decode_wind_shear",
]
