"""
METAR Decoder - Fault taxonomy.

Faults are raised by the decoders and propagated unchanged by the
assembler. Unrecognised groups are not faults: see
`decoder.models.UnclassifiedGroup`.
"""

from __future__ import annotations

from typing import Optional

from decoder.models import GroupFamily


class DecodeFault(Exception):
    """Base class for every decode failure."""

    def __init__(
        self,
        reason: str,
        family: Optional[GroupFamily] = None,
        raw_group: str = "",
        position: Optional[int] = None,
    ):
        self.reason = reason
        self.family = family
        self.raw_group = raw_group
        self.position = position
        super().__init__(self._describe())

    def _describe(self) -> str:
        parts = [self.reason]
        if self.family is not None:
            parts.append(f"family={self.family.value}")
        if self.raw_group:
            parts.append(f"group={self.raw_group!r}")
        if self.position is not None:
            parts.append(f"position={self.position}")
        return " | ".join(parts)

    def at(self, position: int) -> "DecodeFault":
        """Attach the group position once the caller knows it."""
        self.position = position
        self.args = (self._describe(),)
        return self


class EmptyReport(DecodeFault):
    def __init__(self, reason: str = "report contains no groups"):
        super().__init__(reason)


class UnparsableGroup(DecodeFault):
    """A classified group whose mandatory fields could not be extracted."""

    def __init__(self, family: GroupFamily, raw_group: str, reason: str, position: Optional[int] = None):
        super().__init__(reason, family=family, raw_group=raw_group, position=position)


class InternalDecoderFault(DecodeFault):
    """Classifier accepted a shape its decoder then rejected. Always a defect."""

    def __init__(self, family: GroupFamily, raw_group: str, reason: str, position: Optional[int] = None):
        super().__init__(reason, family=family, raw_group=raw_group, position=position)


def to_int(value: str, family: GroupFamily, raw_group: str) -> int:
    """int() for digits already matched by a decoder's strict pattern."""
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise InternalDecoderFault(family, raw_group, f"numeric field {value!r} not parseable: {e}") from e
