"""
Cloud layer decoder.

    BKN025CB -> broken at 2500 ft, cumulonimbus
    VV003    -> vertical visibility 300 ft
    NSC      -> nil significant cloud
"""

from __future__ import annotations

import re

from decoder.errors import UnparsableGroup, to_int
from decoder.models import CloudAmount, CloudLayer, CloudType, GroupFamily

_LAYER_RE = re.compile(r"^(FEW|SCT|BKN|OVC|VV|///)(\d{3}|///)(CB|TCU|ACC|///)?$")
# Automated stations may detect a convective cloud with no amount or height
_TYPE_ONLY_RE = re.compile(r"^///(CB|TCU|ACC)$")

# Amount codes that are never followed by a height
CLEAR_AMOUNTS = {
    CloudAmount.SKY_CLEAR.value: CloudAmount.SKY_CLEAR,
    CloudAmount.CLEAR_BELOW_DETECTION.value: CloudAmount.CLEAR_BELOW_DETECTION,
    CloudAmount.NIL_SIGNIFICANT.value: CloudAmount.NIL_SIGNIFICANT,
    CloudAmount.NIL_DETECTED.value: CloudAmount.NIL_DETECTED,
}


def decode_cloud(group: str) -> CloudLayer:
    if group in CLEAR_AMOUNTS:
        return CloudLayer(amount=CLEAR_AMOUNTS[group])

    type_only = _TYPE_ONLY_RE.match(group)
    if type_only:
        return CloudLayer(amount=CloudAmount.NOT_DETERMINED, type=CloudType(type_only.group(1)))

    match = _LAYER_RE.match(group)
    if not match:
        raise UnparsableGroup(GroupFamily.CLOUD, group, "expected amount + 3-digit height in hundreds of feet")

    amount, height, cloud_type = match.groups()
    return CloudLayer(
        amount=CloudAmount(amount),
        height=None if height == "///" else to_int(height, GroupFamily.CLOUD, group) * 100,
        # "///" type: automated station could not determine the cloud type
        type=CloudType(cloud_type) if cloud_type and cloud_type != "///" else CloudType.NONE,
    )
