"""
permission-translation: turn combined permission bit values into capability names.

A descriptor declares the universe of capabilities as name → bit value.
The validation engine decides whether a combined value is well-formed for
that descriptor, and a RoleCapability decomposes it back into names.

    >>> from permission_translation import CapabilityDescriptor, RoleCapability, is_valid_hex
    >>> d = CapabilityDescriptor({"Read": 0x1, "Write": 0x2, "Delete": 0x4})
    >>> is_valid_hex(0x3, d)
    True
    >>> sorted(RoleCapability(d, 0x3).to_name_set())
    ['Read', 'Write']

Package layout (src/permission_translation/):
  descriptor.py       : CapabilityDescriptor, hex parsing/formatting
  checks.py           : validation engine, reason codes, descriptor diagnostics
  role_capability.py  : RoleCapability views over one permission value
  guard.py            : require_valid_hex() raising variant
  core/               : constants, exceptions, logging, config
"""

from __future__ import annotations

from permission_translation.checks import (
    DescriptorReport,
    ReasonCode,
    ValidationResult,
    inspect_descriptor,
    is_valid_hex,
    is_well_formed,
    max_value,
    or_mask,
    validate_hex,
)
from permission_translation.descriptor import CapabilityDescriptor, format_hex, parse_hex
from permission_translation.guard import InvalidPermissionError, require_valid_hex
from permission_translation.role_capability import RoleCapability

__version__ = "0.1.0"
__all__ = [
    "CapabilityDescriptor",
    "DescriptorReport",
    "InvalidPermissionError",
    "ReasonCode",
    "RoleCapability",
    "ValidationResult",
    "__version__",
    "format_hex",
    "inspect_descriptor",
    "is_valid_hex",
    "is_well_formed",
    "max_value",
    "or_mask",
    "parse_hex",
    "require_valid_hex",
    "validate_hex",
]
