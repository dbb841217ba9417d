"""Permission value enforcement guard.

``require_valid_hex()`` is the guard helper for callers that want an
exception instead of a reason code.  On failure it optionally emits an
audit event and raises ``InvalidPermissionError``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from permission_translation.checks import ValidationResult, validate_hex
from permission_translation.core.exceptions import PermissionTranslationError
from permission_translation.descriptor import CapabilityDescriptor, format_hex

# Callback signature: (event_type: str, payload: dict) -> None
AuditCallback = Callable[[str, dict[str, Any]], None]


class InvalidPermissionError(PermissionTranslationError):
    """Raised when a permission value fails validation."""

    def __init__(self, result: ValidationResult) -> None:
        self.result = result
        self.value = result.value
        super().__init__(
            f"Permission value {format_hex(result.value)} rejected: {result.reason_code}"
        )


def require_valid_hex(
    value: int,
    descriptor: CapabilityDescriptor,
    *,
    audit_callback: AuditCallback | None = None,
) -> ValidationResult:
    """Guard: validate *value* and raise ``InvalidPermissionError`` on failure.

    On failure:
      1. Calls ``audit_callback("permission.rejected", {...})`` if provided.
      2. Raises ``InvalidPermissionError`` with the result.

    On success:
      Returns the ``ValidationResult``.
    """
    result = validate_hex(value, descriptor)

    if not result.valid:
        if audit_callback is not None:
            audit_callback(
                "permission.rejected",
                {
                    "value": value,
                    "value_hex": format_hex(value),
                    "reason_code": result.reason_code,
                    "descriptor_fingerprint": result.descriptor_fingerprint,
                },
            )
        raise InvalidPermissionError(result)

    return result
