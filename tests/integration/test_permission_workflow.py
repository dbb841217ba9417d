"""Integration tests: descriptor from config → validation → role decomposition → guard.

Exercises the public package surface the way an embedding application would.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from permission_translation import (
    CapabilityDescriptor,
    InvalidPermissionError,
    ReasonCode,
    RoleCapability,
    format_hex,
    inspect_descriptor,
    is_valid_hex,
    max_value,
    require_valid_hex,
)
from permission_translation.core.config import load_config

SERVER_TOML = """
config_version = 1

[logging]
level = "WARNING"

[capabilities]
SendMessage = 0x1
ManageChannel = 0x2
ManageServer = 0x4
KickMembers = 0x8
BanMembers = 0x10
Administrator = 0x20
"""


@pytest.fixture
def server_descriptor(tmp_path: Path) -> CapabilityDescriptor:
    p = tmp_path / "permissions.toml"
    p.write_text(SERVER_TOML)
    return load_config(p).build_descriptor()


class TestServerPermissions:
    def test_descriptor_is_well_formed(self, server_descriptor: CapabilityDescriptor) -> None:
        report = inspect_descriptor(server_descriptor)
        assert report.well_formed is True
        assert max_value(server_descriptor) == 0x3F

    def test_user_role(self, server_descriptor: CapabilityDescriptor) -> None:
        user = RoleCapability(server_descriptor, 0x1)
        assert user.is_valid()
        assert user.to_name_set() == {"SendMessage"}
        assert not user.has_capability("Administrator")

    def test_moderator_built_from_names(self, server_descriptor: CapabilityDescriptor) -> None:
        moderator = RoleCapability.from_names(
            server_descriptor, ["SendMessage", "ManageChannel", "KickMembers", "BanMembers"]
        )
        assert format_hex(moderator.hex_value) == "0x1B"
        assert require_valid_hex(moderator.hex_value, server_descriptor).valid
        assert moderator.to_hex_set() == {0x1, 0x2, 0x8, 0x10}

    def test_admin_has_everything(self, server_descriptor: CapabilityDescriptor) -> None:
        admin = RoleCapability(server_descriptor, max_value(server_descriptor))
        assert admin.to_name_set() == set(server_descriptor)
        for name in server_descriptor:
            assert admin.has_capability(name)

    def test_stored_value_from_newer_schema_rejected(
        self, server_descriptor: CapabilityDescriptor
    ) -> None:
        """A value using a bit this descriptor never declared is rejected but still decodable."""
        stored = 0x41
        events: list[tuple[str, dict]] = []

        with pytest.raises(InvalidPermissionError) as exc_info:
            require_valid_hex(
                stored,
                server_descriptor,
                audit_callback=lambda event, payload: events.append((event, payload)),
            )

        assert exc_info.value.result.reason_code == ReasonCode.INVALID_BITS
        assert exc_info.value.result.undefined_bits == 0x40
        assert events[0][0] == "permission.rejected"
        assert RoleCapability(server_descriptor, stored).to_name_set() == {"SendMessage"}


class TestFilePermissions:
    """Unix-style owner/group/other bits."""

    @pytest.fixture
    def descriptor(self) -> CapabilityDescriptor:
        d = CapabilityDescriptor()
        for shift, who in ((6, "Owner"), (3, "Group"), (0, "Other")):
            d.insert(f"{who}Read", 0x4 << shift)
            d.insert(f"{who}Write", 0x2 << shift)
            d.insert(f"{who}Execute", 0x1 << shift)
        return d

    def test_read_only_all(self, descriptor: CapabilityDescriptor) -> None:
        role = RoleCapability(descriptor, 0o444)
        assert is_valid_hex(0o444, descriptor)
        assert role.to_name_set() == {"OwnerRead", "GroupRead", "OtherRead"}

    def test_executable(self, descriptor: CapabilityDescriptor) -> None:
        role = RoleCapability(descriptor, 0o755)
        assert is_valid_hex(0o755, descriptor)
        assert len(role.to_name_set()) == 7
        assert not role.has_capability("GroupWrite")
        assert not role.has_capability("OtherWrite")

    def test_bit_beyond_mode_rejected(self, descriptor: CapabilityDescriptor) -> None:
        assert not is_valid_hex(0o1000, descriptor)


class TestCorruptedDescriptorWorkflow:
    def test_mutation_after_role_construction(self) -> None:
        """A role keeps its own copy, so corrupting the caller's descriptor later is invisible."""
        d = CapabilityDescriptor({"Read": 0x1, "Write": 0x2})
        role = RoleCapability(d, 0x3)
        d.insert("Alias", 0x1)

        assert not is_valid_hex(0x3, d)
        assert role.is_valid()
        assert role.to_name_set() == {"Read", "Write"}
