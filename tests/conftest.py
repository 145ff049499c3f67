"""Pytest configuration and shared fixtures for vmdeck tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from vmdeck.deploy.state import DeploymentStateService
from vmdeck.deploy.vm_repo import VMRepo

MANIFEST_YAML = """\
name: test-deployment

networks:
  - name: private
    type: manual
    netmask: 255.255.255.0
    gateway: 10.0.0.1
    dns: [10.0.0.2]
    cloud_properties:
      vlan: 1234

resource_pools:
  - name: vms
    network: private
    cloud_properties:
      instance_type: m1.small
    env:
      bosh:
        password: secret

jobs:
  - name: director
    instances: 1
    resource_pool: vms
    networks:
      - name: private
        static_ips: [10.0.0.5]
        default: [dns, gateway]
"""


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """Path of a not-yet-existing deployment state file."""
    return tmp_path / ".vmdeck" / "deployment-state.json"


@pytest.fixture
def vm_repo(state_path: Path) -> VMRepo:
    """VM repo backed by a real state file in a temp directory."""
    return VMRepo(DeploymentStateService(state_path))


@pytest.fixture
def manifest_file(tmp_path: Path) -> Path:
    """Write a valid single-job manifest and return its path."""
    path = tmp_path / "manifest.yml"
    path.write_text(MANIFEST_YAML, encoding="utf-8")
    return path
