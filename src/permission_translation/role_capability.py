"""RoleCapability: one permission value bound to the descriptor that explains it."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from permission_translation.checks import ValidationResult, validate_hex
from permission_translation.core.exceptions import UnknownCapabilityError
from permission_translation.descriptor import (
    CapabilityDescriptor,
    CapabilityName,
    CapabilityValue,
    PermissionValue,
    format_hex,
)


def _contains(value: PermissionValue, bit: CapabilityValue) -> bool:
    # A zero bit would be vacuously contained in every value
    return bit != 0 and value & bit == bit


class RoleCapability:
    """A permission value decomposed against its own copy of a descriptor.

    Construction never fails, even for values the descriptor rejects;
    call :meth:`validate` to find out whether the pair is consistent.
    Nothing is cached, so every query recomputes from the stored pair.

    Example::

        >>> d = CapabilityDescriptor({"Read": 0x1, "Write": 0x2, "Admin": 0x8})
        >>> role = RoleCapability(d, 0x3)
        >>> sorted(role.to_name_set())
        ['Read', 'Write']
        >>> role.has_capability("Admin")
        False
    """

    __slots__ = ("_descriptor", "_hex_value")

    def __init__(
        self,
        descriptor: Mapping[CapabilityName, CapabilityValue],
        hex_value: PermissionValue,
    ) -> None:
        self._descriptor = CapabilityDescriptor(descriptor)
        self._hex_value = hex_value

    @classmethod
    def from_names(
        cls,
        descriptor: Mapping[CapabilityName, CapabilityValue],
        names: Iterable[CapabilityName],
    ) -> RoleCapability:
        """Build a role holding exactly the named capabilities.

        Raises ``UnknownCapabilityError`` if a name is not in *descriptor*.
        """
        value = 0
        for name in names:
            if name not in descriptor:
                raise UnknownCapabilityError(name)
            value |= descriptor[name]
        return cls(descriptor, value)

    # -- accessors ----------------------------------------------------------

    @property
    def hex_value(self) -> PermissionValue:
        return self._hex_value

    @property
    def descriptor(self) -> CapabilityDescriptor:
        """A copy of the owned descriptor; mutating it does not affect the role."""
        return self._descriptor.copy()

    # -- derived views ------------------------------------------------------

    def to_name_set(self) -> set[CapabilityName]:
        return {
            name
            for name, bit in self._descriptor.all_entries()
            if _contains(self._hex_value, bit)
        }

    def to_hex_set(self) -> set[CapabilityValue]:
        return {
            bit for _, bit in self._descriptor.all_entries() if _contains(self._hex_value, bit)
        }

    def has_capability(self, name: CapabilityName) -> bool:
        bit = self._descriptor.get(name)
        if bit is None:
            return False
        return _contains(self._hex_value, bit)

    def validate(self) -> ValidationResult:
        return validate_hex(self._hex_value, self._descriptor)

    def is_valid(self) -> bool:
        return self.validate().valid

    def to_dict(self) -> dict[str, Any]:
        return {
            "hex_value": format_hex(self._hex_value),
            "capabilities": sorted(self.to_name_set()),
            "hex_values": [format_hex(v) for v in sorted(self.to_hex_set())],
            "valid": self.is_valid(),
        }

    # -- value semantics ----------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RoleCapability):
            return NotImplemented
        return self._hex_value == other._hex_value and self._descriptor == other._descriptor

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            f"RoleCapability(hex_value={format_hex(self._hex_value)}, "
            f"descriptor={self._descriptor!r})"
        )
