"""Cloud implementation backed by an external CPI executable.

Each call runs the CPI command once, writes a JSON request on stdin and reads
a JSON response from stdout::

    request:  {"method": ..., "arguments": [...], "context": {...}}
    response: {"result": ..., "error": {"type", "message", "ok_to_retry"} | null,
               "log": "..."}
"""

from __future__ import annotations

import json
import logging
import shlex
import subprocess  # nosec B404
from collections.abc import Callable
from typing import Any

from pydantic import ValidationError

from vmdeck.deploy.cloud.base import BaseCloud
from vmdeck.lib.errors import CloudError, CloudErrorKind, CPINotFoundError
from vmdeck.models.vm import NetworkIdentity, VMMetadata

logger = logging.getLogger(__name__)

CPI_ERROR_KINDS: dict[str, CloudErrorKind] = {
    "Bosh::Clouds::NotImplemented": CloudErrorKind.NOT_IMPLEMENTED,
    "Bosh::Clouds::VMNotFound": CloudErrorKind.VM_NOT_FOUND,
    "Bosh::Clouds::VMCreationFailed": CloudErrorKind.VM_CREATION_FAILED,
}

Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class CPICloud(BaseCloud):
    """Talk to a cloud provider through its CPI executable."""

    def __init__(
        self,
        command: str,
        context: dict[str, Any] | None = None,
        runner: Runner = subprocess.run,
    ) -> None:
        """Initialize the CPI cloud.

        Args:
            command: CPI executable, optionally with arguments (shell-split)
            context: Context object sent with every request (e.g. director_uuid)
            runner: Callable with the ``subprocess.run`` signature
        """
        self._args = shlex.split(command)
        if not self._args:
            raise CPINotFoundError(command)
        self._context = context or {}
        self._runner = runner

    def create_vm(
        self,
        agent_id: str,
        stemcell_cid: str,
        cloud_properties: dict[str, Any],
        network_interfaces: dict[str, dict[str, Any]],
        env: dict[str, Any],
    ) -> str:
        result = self._call(
            "create_vm",
            [agent_id, stemcell_cid, cloud_properties, network_interfaces, [], env],
        )
        if not isinstance(result, str) or not result:
            raise CloudError(
                method="create_vm",
                message=f"CPI returned an invalid VM cid: {result!r}",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            )
        return result

    def set_vm_metadata(self, cid: str, metadata: VMMetadata) -> None:
        self._call("set_vm_metadata", [cid, metadata.model_dump(mode="json")])

    def find_vm(self, cid: str) -> NetworkIdentity:
        result = self._call("find_vm", [cid])
        if not isinstance(result, dict):
            raise CloudError(
                method="find_vm",
                message=f"CPI returned no details for vm '{cid}'",
                kind=CloudErrorKind.VM_NOT_FOUND,
            )
        hostname = result.get("hostname") or result.get("fullyQualifiedDomainName")
        private_ip = result.get("private_ip") or result.get("primaryBackendIpAddress")
        if not hostname or not private_ip:
            raise CloudError(
                method="find_vm",
                message=f"CPI response for vm '{cid}' lacks hostname or private IP",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            )
        try:
            return NetworkIdentity(hostname=hostname, private_ip=private_ip)
        except ValidationError as exc:
            raise CloudError(
                method="find_vm",
                message=(
                    f"CPI returned an invalid network identity for vm '{cid}': {exc}"
                ),
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            ) from exc

    def _call(self, method: str, arguments: list[Any]) -> Any:
        request = json.dumps(
            {"method": method, "arguments": arguments, "context": self._context}
        )
        logger.debug("CPI request: %s %s", method, request)

        try:
            proc = self._runner(
                self._args,
                input=request,
                check=False,
                text=True,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            raise CPINotFoundError(self._args[0], method=method) from exc
        except OSError as exc:
            raise CloudError(
                method=method,
                message=f"Could not run CPI '{self._args[0]}': {exc}",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            ) from exc

        if proc.returncode != 0:
            details = (proc.stderr or "").strip() or (proc.stdout or "").strip()
            raise CloudError(
                method=method,
                message=f"CPI exited with status {proc.returncode}: {details}",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            )

        try:
            response = json.loads(proc.stdout)
        except json.JSONDecodeError as exc:
            raise CloudError(
                method=method,
                message=f"Could not parse CPI response: {exc}",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            ) from exc
        if not isinstance(response, dict):
            raise CloudError(
                method=method,
                message="Unexpected CPI response: expected a JSON object",
                kind=CloudErrorKind.CPI_EXECUTION_FAILED,
            )

        if response.get("log"):
            logger.debug("CPI log (%s): %s", method, response["log"])

        error = response.get("error")
        if error:
            if not isinstance(error, dict):
                error = {"message": str(error)}
            error_type = str(error.get("type", ""))
            raise CloudError(
                method=method,
                message=f"{error_type}: {error.get('message', 'unknown error')}",
                kind=CPI_ERROR_KINDS.get(error_type, CloudErrorKind.CLOUD_ERROR),
                ok_to_retry=bool(error.get("ok_to_retry", False)),
            )

        return response.get("result")
