"""Unit tests for the CPI-backed cloud."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from vmdeck.deploy.cloud import create_cloud
from vmdeck.deploy.cloud.cpi import CPICloud
from vmdeck.lib.errors import (
    CloudError,
    CloudErrorKind,
    CPINotFoundError,
    ConfigError,
)
from vmdeck.models.config import DeckConfig
from vmdeck.models.vm import NetworkIdentity, VMMetadata


def _runner(
    payload: dict[str, Any] | str, returncode: int = 0, stderr: str = ""
) -> MagicMock:
    stdout = payload if isinstance(payload, str) else json.dumps(payload)
    runner = MagicMock()
    runner.return_value = subprocess.CompletedProcess(
        args=["cpi"], returncode=returncode, stdout=stdout, stderr=stderr
    )
    return runner


def _request(runner: MagicMock) -> dict[str, Any]:
    return json.loads(runner.call_args.kwargs["input"])


class TestCPIRequests:
    """Tests for request encoding and result decoding."""

    def test_create_vm_sends_request(self) -> None:
        """create_vm sends method, arguments and context on stdin."""
        runner = _runner({"result": "vm-123", "error": None, "log": ""})
        cloud = CPICloud("/opt/cpi --debug", context={"director": "d"}, runner=runner)

        cid = cloud.create_vm(
            "agent-1", "img-1", {"type": "small"}, {"net": {"type": "dynamic"}}, {}
        )

        assert cid == "vm-123"
        assert runner.call_args.args[0] == ["/opt/cpi", "--debug"]
        assert _request(runner) == {
            "method": "create_vm",
            "arguments": [
                "agent-1",
                "img-1",
                {"type": "small"},
                {"net": {"type": "dynamic"}},
                [],
                {},
            ],
            "context": {"director": "d"},
        }

    def test_create_vm_rejects_empty_cid(self) -> None:
        """An empty result is not a usable CID."""
        cloud = CPICloud("cpi", runner=_runner({"result": "", "error": None}))

        with pytest.raises(CloudError) as exc:
            cloud.create_vm("a", "s", {}, {}, {})

        assert exc.value.kind == CloudErrorKind.CPI_EXECUTION_FAILED

    def test_set_vm_metadata_sends_tags(self) -> None:
        """Metadata is serialized as a plain mapping."""
        runner = _runner({"result": None, "error": None})
        cloud = CPICloud("cpi", runner=runner)

        cloud.set_vm_metadata("vm-1", VMMetadata(deployment="dep", job="job"))

        assert _request(runner)["arguments"] == [
            "vm-1",
            {"deployment": "dep", "job": "job", "index": "0", "director": "vmdeck"},
        ]

    @pytest.mark.parametrize(
        "result",
        [
            {"hostname": "vm-1.example", "private_ip": "10.0.0.5"},
            {
                "fullyQualifiedDomainName": "vm-1.example",
                "primaryBackendIpAddress": "10.0.0.5",
            },
        ],
    )
    def test_find_vm_parses_identity(self, result: dict[str, str]) -> None:
        """Both generic and provider-specific keys are understood."""
        cloud = CPICloud("cpi", runner=_runner({"result": result, "error": None}))

        identity = cloud.find_vm("vm-1")

        assert identity == NetworkIdentity(
            hostname="vm-1.example", private_ip="10.0.0.5"
        )

    def test_find_vm_missing_fields(self) -> None:
        """A partial description is rejected."""
        cloud = CPICloud(
            "cpi", runner=_runner({"result": {"hostname": "h"}, "error": None})
        )

        with pytest.raises(CloudError, match="lacks hostname or private IP"):
            cloud.find_vm("vm-1")

    @pytest.mark.parametrize(
        "result",
        [
            {"hostname": "vm-1\n6.6.6.6 evil.example", "private_ip": "10.0.0.5"},
            {"hostname": "vm-1 extra", "private_ip": "10.0.0.5"},
            {"hostname": "vm-1", "private_ip": "10.0.0.5\n"},
            {"hostname": "vm-1", "private_ip": 167772165},
        ],
    )
    def test_find_vm_rejects_malformed_identity(self, result: dict[str, Any]) -> None:
        """Values that cannot form a single hosts line are CPI failures."""
        cloud = CPICloud("cpi", runner=_runner({"result": result, "error": None}))

        with pytest.raises(CloudError, match="invalid network identity") as exc:
            cloud.find_vm("vm-1")

        assert exc.value.kind == CloudErrorKind.CPI_EXECUTION_FAILED
        assert isinstance(exc.value.__cause__, ValidationError)

    def test_find_vm_null_result(self) -> None:
        """A null result means the VM was not found."""
        cloud = CPICloud("cpi", runner=_runner({"result": None, "error": None}))

        with pytest.raises(CloudError) as exc:
            cloud.find_vm("vm-1")

        assert exc.value.kind == CloudErrorKind.VM_NOT_FOUND


class TestCPIErrors:
    """Tests for CPI error mapping."""

    @pytest.mark.parametrize(
        ("error_type", "kind"),
        [
            ("Bosh::Clouds::NotImplemented", CloudErrorKind.NOT_IMPLEMENTED),
            ("Bosh::Clouds::VMNotFound", CloudErrorKind.VM_NOT_FOUND),
            ("Bosh::Clouds::VMCreationFailed", CloudErrorKind.VM_CREATION_FAILED),
            ("Bosh::Clouds::CloudError", CloudErrorKind.CLOUD_ERROR),
        ],
    )
    def test_error_type_maps_to_kind(
        self, error_type: str, kind: CloudErrorKind
    ) -> None:
        """CPI error types map onto the closed kind enum."""
        payload = {
            "result": None,
            "error": {"type": error_type, "message": "m", "ok_to_retry": True},
        }
        cloud = CPICloud("cpi", runner=_runner(payload))

        with pytest.raises(CloudError) as exc:
            cloud.set_vm_metadata("vm-1", VMMetadata(deployment="d", job="j"))

        assert exc.value.kind == kind
        assert exc.value.ok_to_retry is True
        assert exc.value.method == "set_vm_metadata"

    def test_nonzero_exit(self) -> None:
        """A crashing CPI is an execution failure."""
        cloud = CPICloud("cpi", runner=_runner("", returncode=1, stderr="segfault"))

        with pytest.raises(CloudError, match="segfault") as exc:
            cloud.find_vm("vm-1")

        assert exc.value.kind == CloudErrorKind.CPI_EXECUTION_FAILED

    def test_invalid_json(self) -> None:
        """Unparsable output is an execution failure."""
        cloud = CPICloud("cpi", runner=_runner("not json"))

        with pytest.raises(CloudError, match="Could not parse CPI response"):
            cloud.find_vm("vm-1")

    def test_missing_executable(self) -> None:
        """A missing CPI binary raises CPINotFoundError."""
        runner = MagicMock(side_effect=FileNotFoundError("cpi"))
        cloud = CPICloud("/nope/cpi", runner=runner)

        with pytest.raises(CPINotFoundError, match="/nope/cpi") as exc:
            cloud.find_vm("vm-1")

        assert isinstance(exc.value, CloudError)
        assert exc.value.method == "find_vm"
        assert exc.value.kind == CloudErrorKind.CPI_EXECUTION_FAILED

    def test_empty_command(self) -> None:
        """An empty command cannot be run."""
        with pytest.raises(CPINotFoundError):
            CPICloud("  ")


class TestCreateCloud:
    """Tests for the cloud factory."""

    def test_create_cloud_requires_cpi(self, tmp_path: Path) -> None:
        """Missing CPI configuration is a configuration error."""
        config = DeckConfig(state_file=tmp_path / "state.json")

        with pytest.raises(ConfigError, match="No CPI executable configured"):
            create_cloud(config)

    def test_create_cloud_returns_cpi_cloud(self, tmp_path: Path) -> None:
        """A configured CPI yields a CPICloud."""
        config = DeckConfig(state_file=tmp_path / "state.json", cpi_command="cpi")

        assert isinstance(create_cloud(config), CPICloud)
