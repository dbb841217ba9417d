"""Validation engine: pure checks over a descriptor and a permission value.

No I/O, no time, no randomness.  Same inputs always produce the same
``ValidationResult`` and fingerprint.  Failures are reported as reason
codes; nothing in this module raises for an invalid value.
"""

from __future__ import annotations

from dataclasses import dataclass
from itertools import combinations
from typing import Any

import structlog

from permission_translation.core.constants import MAX_PERMISSION_VALUE
from permission_translation.descriptor import CapabilityDescriptor, format_hex

logger = structlog.get_logger()


# ---------------------------------------------------------------------------
# Stable reason codes
# ---------------------------------------------------------------------------


class ReasonCode:
    """Stable string constants for validation outcomes."""

    VALID = "VALID"
    CORRUPTED_DESCRIPTOR = "CORRUPTED_DESCRIPTOR"
    INVALID_BITS = "INVALID_BITS"
    PERMISSION_OVERFLOW = "PERMISSION_OVERFLOW"


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ValidationResult:
    """Immutable result of a permission value check."""

    valid: bool
    reason_code: str
    value: int
    or_mask: int
    max_value: int
    undefined_bits: int  # bits of value outside the OR-mask, 0 if none
    descriptor_fingerprint: str  # stable SHA-256 hex

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "valid": self.valid,
            "reason_code": self.reason_code,
            "value": format_hex(self.value),
            "or_mask": format_hex(self.or_mask),
            "max_value": format_hex(self.max_value),
            "undefined_bits": format_hex(self.undefined_bits),
            "descriptor_fingerprint": self.descriptor_fingerprint,
        }


@dataclass(frozen=True)
class DescriptorReport:
    """Diagnostics for a descriptor.

    Attributes:
        well_formed: OR-mask equals sum and every value fits the integer width.
        overlaps: ``(name_a, name_b, shared_bits)`` for each pair sharing a
            set bit, names in sorted order.
        zero_entries: Names whose value is zero.  Degenerate: they never match
            a permission value, but do not break well-formedness on their own.
        non_power_of_two_entries: Names whose value has more than one bit set.
        out_of_range_entries: Names whose value is negative or wider than the
            permission width.
    """

    well_formed: bool
    or_mask: int
    sum_value: int
    overlaps: tuple[tuple[str, str, int], ...] = ()
    zero_entries: tuple[str, ...] = ()
    non_power_of_two_entries: tuple[str, ...] = ()
    out_of_range_entries: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "well_formed": self.well_formed,
            "or_mask": format_hex(self.or_mask),
            "sum_value": format_hex(self.sum_value),
            "overlaps": [[a, b, format_hex(bits)] for a, b, bits in self.overlaps],
            "zero_entries": list(self.zero_entries),
            "non_power_of_two_entries": list(self.non_power_of_two_entries),
            "out_of_range_entries": list(self.out_of_range_entries),
        }


# ---------------------------------------------------------------------------
# Reductions
# ---------------------------------------------------------------------------


def or_mask(descriptor: CapabilityDescriptor) -> int:
    """Bitwise OR of every capability value in *descriptor*."""
    return descriptor.or_mask()


def max_value(descriptor: CapabilityDescriptor) -> int:
    """Maximum permission value: the arithmetic sum of every capability value."""
    return descriptor.max_value()


def _in_range(value: int) -> bool:
    return 0 <= value <= MAX_PERMISSION_VALUE


# ---------------------------------------------------------------------------
# Descriptor checks
# ---------------------------------------------------------------------------


def is_well_formed(descriptor: CapabilityDescriptor) -> bool:
    """Return True if no two entries share a set bit.

    Equivalent to ``or_mask == sum``.  Entries outside the unsigned
    permission width, or a sum wider than it, also make the descriptor
    corrupted.
    """
    values = [value for _, value in descriptor.all_entries()]
    if not all(_in_range(v) for v in values):
        return False
    total = sum(values)
    if total > MAX_PERMISSION_VALUE:
        return False
    mask = 0
    for v in values:
        mask |= v
    # For non-negative values mask <= total always; equality means no overlap
    return mask == total


def inspect_descriptor(descriptor: CapabilityDescriptor) -> DescriptorReport:
    """Collect diagnostics for every degenerate or overlapping entry."""
    entries = descriptor.sorted_entries()

    out_of_range = tuple(name for name, v in entries if not _in_range(v))
    zero = tuple(name for name, v in entries if v == 0)
    non_pow2 = tuple(name for name, v in entries if v > 0 and v & (v - 1) != 0)

    overlaps = []
    for (name_a, a), (name_b, b) in combinations(entries, 2):
        shared = a & b
        if shared != 0:
            overlaps.append((name_a, name_b, shared))

    return DescriptorReport(
        well_formed=is_well_formed(descriptor),
        or_mask=descriptor.or_mask(),
        sum_value=descriptor.max_value(),
        overlaps=tuple(overlaps),
        zero_entries=zero,
        non_power_of_two_entries=non_pow2,
        out_of_range_entries=out_of_range,
    )


# ---------------------------------------------------------------------------
# Value checks
# ---------------------------------------------------------------------------


def _evaluate(value: int, descriptor: CapabilityDescriptor) -> tuple[str, int, int, int]:
    """Apply the rules in order; return ``(reason_code, or_mask, max_value, undefined_bits)``."""
    mask = descriptor.or_mask()
    maximum = descriptor.max_value()
    undefined = 0

    if not is_well_formed(descriptor):
        reason_code = ReasonCode.CORRUPTED_DESCRIPTOR
    elif value & ~mask != 0:
        reason_code = ReasonCode.INVALID_BITS
        undefined = value & ~mask
    elif value > maximum:
        reason_code = ReasonCode.PERMISSION_OVERFLOW
    else:
        return ReasonCode.VALID, mask, maximum, 0

    logger.debug(
        "permission_rejected",
        reason_code=reason_code,
        value=format_hex(value),
        or_mask=format_hex(mask),
        max_value=format_hex(maximum),
    )
    return reason_code, mask, maximum, undefined


def validate_hex(value: int, descriptor: CapabilityDescriptor) -> ValidationResult:
    """Check *value* against *descriptor* and say why it fails, if it does.

    Rules, in order::

        1. Descriptor not well-formed       → CORRUPTED_DESCRIPTOR
        2. value has a bit outside OR-mask  → INVALID_BITS
        3. value > sum of descriptor values → PERMISSION_OVERFLOW
        4. otherwise                        → VALID

    Rule 3 cannot trigger for a descriptor that passed rule 1: for a
    well-formed descriptor the OR-mask equals the sum.
    """
    reason_code, mask, maximum, undefined = _evaluate(value, descriptor)
    return ValidationResult(
        valid=reason_code == ReasonCode.VALID,
        reason_code=reason_code,
        value=value,
        or_mask=mask,
        max_value=maximum,
        undefined_bits=undefined,
        descriptor_fingerprint=descriptor.fingerprint(),
    )


def is_valid_hex(value: int, descriptor: CapabilityDescriptor) -> bool:
    """Return True if *value* is a valid permission value for *descriptor*.

    Same rules as :func:`validate_hex` without building the result, so the
    descriptor is not fingerprinted.
    """
    return _evaluate(value, descriptor)[0] == ReasonCode.VALID
