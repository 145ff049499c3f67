"""Unit tests for local name resolution."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from vmdeck.deploy.name_resolution import (
    HostsFileResolver,
    NoopNameResolver,
    render_hosts_file,
)
from vmdeck.lib.errors import ResolutionError
from vmdeck.models.vm import NetworkIdentity

IDENTITY = NetworkIdentity(hostname="vm-1.example", private_ip="10.0.0.5")


class TestRenderHostsFile:
    """Tests for hosts file rendering."""

    def test_render_exact_content(self) -> None:
        """Rendered content is the loopback line plus the VM mapping."""
        assert render_hosts_file(IDENTITY) == (
            "127.0.0.1 localhost\n10.0.0.5 vm-1.example\n"
        )

    def test_render_ipv6_identity(self) -> None:
        """IPv6 addresses are accepted as private IPs."""
        identity = NetworkIdentity(hostname="vm-1", private_ip="fd00::5")

        assert render_hosts_file(identity).splitlines() == [
            "127.0.0.1 localhost",
            "fd00::5 vm-1",
        ]

    @pytest.mark.parametrize(
        ("hostname", "private_ip"),
        [
            ("vm-1\n6.6.6.6 evil.example", "10.0.0.5"),
            ("vm 1", "10.0.0.5"),
            ("vm-1", "10.0.0.5 extra"),
            ("", "10.0.0.5"),
        ],
    )
    def test_identity_cannot_add_lines(self, hostname: str, private_ip: str) -> None:
        """Identities that would break the two-line layout are rejected."""
        with pytest.raises(ValidationError):
            NetworkIdentity(hostname=hostname, private_ip=private_ip)


class TestHostsFileResolver:
    """Tests for HostsFileResolver."""

    def test_update_overwrites_file(self, tmp_path: Path) -> None:
        """Existing content is replaced, not appended to."""
        hosts = tmp_path / "hosts"
        hosts.write_text("10.9.9.9 stale.example\n" * 5, encoding="utf-8")

        HostsFileResolver(hosts).update(IDENTITY)

        assert hosts.read_text(encoding="utf-8") == (
            "127.0.0.1 localhost\n10.0.0.5 vm-1.example\n"
        )

    def test_update_write_failure_raises(self, tmp_path: Path) -> None:
        """Unwritable paths surface as ResolutionError."""
        hosts = tmp_path / "missing-dir" / "hosts"

        with pytest.raises(ResolutionError, match="Writing to"):
            HostsFileResolver(hosts).update(IDENTITY)

    def test_default_path(self) -> None:
        """The default target is the system hosts file."""
        assert HostsFileResolver().path == Path("/etc/hosts")


class TestNoopNameResolver:
    """Tests for NoopNameResolver."""

    def test_update_does_nothing(self, tmp_path: Path) -> None:
        """The no-op resolver writes nothing."""
        NoopNameResolver().update(IDENTITY)

        assert list(tmp_path.iterdir()) == []
