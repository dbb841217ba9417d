"""Capability descriptor, the name → bit-value universe of one permission system.

A descriptor is a plain mapping with an explicit ``insert``.  It performs no
validation: overlapping, zero, or out-of-range values are accepted here and
reported later by :mod:`permission_translation.checks`.
"""

from __future__ import annotations

import hashlib
import json
import re
from collections.abc import Iterator, Mapping
from typing import Any

CapabilityName = str
CapabilityValue = int
PermissionValue = int

_PREFIX_BASES = {"0x": 16, "0b": 2, "0o": 8}
# Sign, base prefix, digits; int() still checks the digits against the base
_INT_TEXT = re.compile(r"([+-]?)(0x|0b|0o)?([0-9a-f_]+)")


# ---------------------------------------------------------------------------
# Hex helpers
# ---------------------------------------------------------------------------


def parse_hex(raw: Any) -> int:
    """Parse an integer or integer text (``"0x1F"``, ``"0b101"``, ``"0o7"``, ``"31"``).

    Text is an optional sign, an optional base prefix and the digits, with
    surrounding whitespace ignored.  Decimal text may have leading zeros.

    Raises ``TypeError`` for non-integer inputs (``bool`` included) and
    ``ValueError`` for malformed text.
    """
    if isinstance(raw, bool):
        raise TypeError("Permission value must be an integer, not bool")
    if isinstance(raw, int):
        return raw
    if not isinstance(raw, str):
        raise TypeError(f"Permission value must be int or str, got {type(raw).__name__}")

    match = _INT_TEXT.fullmatch(raw.strip().lower())
    if match is None:
        raise ValueError(f"Invalid permission value {raw!r}")
    sign, prefix, digits = match.groups()
    try:
        value = int(digits, _PREFIX_BASES.get(prefix, 10))
    except ValueError:
        raise ValueError(f"Invalid permission value {raw!r}") from None
    return -value if sign == "-" else value


def format_hex(value: int) -> str:
    """Render *value* as upper-case hex with a ``0x`` prefix."""
    if value < 0:
        return f"-0x{-value:X}"
    return f"0x{value:X}"


# ---------------------------------------------------------------------------
# Descriptor
# ---------------------------------------------------------------------------


class CapabilityDescriptor(Mapping[CapabilityName, CapabilityValue]):
    """Mapping from capability name to its bit value.

    Built incrementally with :meth:`insert`, then handed to the validation
    engine or a :class:`~permission_translation.role_capability.RoleCapability`.
    Entry order carries no meaning.
    """

    __slots__ = ("_entries",)

    def __init__(self, entries: Mapping[CapabilityName, CapabilityValue] | None = None) -> None:
        self._entries: dict[CapabilityName, CapabilityValue] = {}
        if entries:
            for name, value in entries.items():
                self.insert(name, value)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> CapabilityDescriptor:
        """Build a descriptor from a mapping whose values are ints or integer text."""
        descriptor = cls()
        for name, raw in mapping.items():
            descriptor.insert(str(name), parse_hex(raw))
        return descriptor

    # -- mutation -----------------------------------------------------------

    def insert(self, name: CapabilityName, value: CapabilityValue) -> None:
        """Add or overwrite the bit value for *name*."""
        self._entries[name] = value

    # -- mapping protocol ---------------------------------------------------

    def __getitem__(self, name: CapabilityName) -> CapabilityValue:
        return self._entries[name]

    def __iter__(self) -> Iterator[CapabilityName]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CapabilityDescriptor):
            return self._entries == other._entries
        if isinstance(other, Mapping):
            return self._entries == dict(other.items())
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        body = ", ".join(f"{name!r}: {format_hex(v)}" for name, v in self.sorted_entries())
        return f"CapabilityDescriptor({{{body}}})"

    # -- derived values -----------------------------------------------------

    def max_value(self) -> int:
        """Arithmetic sum of all values.

        This is the sum, not the OR: the two only agree for a well-formed
        descriptor, which is what the well-formedness check relies on.
        """
        return sum(self._entries.values())

    def or_mask(self) -> int:
        """Bitwise OR of all values."""
        mask = 0
        for value in self._entries.values():
            mask |= value
        return mask

    def all_entries(self) -> list[tuple[CapabilityName, CapabilityValue]]:
        return list(self._entries.items())

    def sorted_entries(self) -> list[tuple[CapabilityName, CapabilityValue]]:
        """Entries ordered by name.

        Names are compared by ``repr`` so a descriptor holding names of
        different types still sorts, and ``1`` and ``"1"`` stay distinct.
        """
        return sorted(self._entries.items(), key=lambda entry: repr(entry[0]))

    def copy(self) -> CapabilityDescriptor:
        return CapabilityDescriptor(self._entries)

    def to_dict(self) -> dict[str, int]:
        return dict(self._entries)

    def fingerprint(self) -> str:
        """Stable SHA-256 hex over the sorted entries.

        Insertion order does not affect the result.
        """
        canonical = json.dumps(
            self.sorted_entries(),
            separators=(",", ":"),
        )
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
