"""Custom exception hierarchy for vmdeck configuration and deployment operations."""

from __future__ import annotations

from enum import Enum


class VMDeckError(Exception):
    """Base exception for all vmdeck errors.

    All vmdeck-specific exceptions inherit from this class, enabling
    centralized exception handling in the CLI.
    """

    pass


class ConfigError(VMDeckError):
    """Exception raised for configuration errors.

    Raised when manifest or settings loading fails, or when a manifest
    lookup (job, network, resource pool) cannot be satisfied.

    Attributes:
        field: The configuration field that caused the error
        message: Human-readable error message describing the issue
    """

    def __init__(self, field: str, message: str) -> None:
        """Initialize ConfigError with field and message.

        Args:
            field: Configuration field name where error occurred
            message: Descriptive error message
        """
        self.field = field
        self.message = message
        super().__init__(f"Configuration error in '{field}': {message}")


class FileNotFoundError(VMDeckError):
    """Exception raised when a configuration file is not found.

    Attributes:
        path: Path to the file that was not found
        message: Human-readable error message
    """

    def __init__(self, path: str, message: str) -> None:
        """Initialize FileNotFoundError with path and message.

        Args:
            path: Path to the file that was not found
            message: Descriptive error message, optionally with suggestions
        """
        self.path = path
        self.message = message
        super().__init__(f"File not found: {path}\n{message}")


class DeploymentError(VMDeckError):
    """Exception raised when a deployment operation fails.

    Attributes:
        operation: Short name of the operation that failed (e.g. create_vm)
        message: Human-readable error message with context
    """

    def __init__(self, operation: str, message: str) -> None:
        """Create a deployment error for an operation."""
        self.operation = operation
        self.message = message
        super().__init__(f"Deployment {operation} failed: {message}")


class StateIOError(DeploymentError):
    """Exception raised when the deployment state file cannot be read or written."""

    def __init__(self, message: str, operation: str = "state") -> None:
        """Create a state I/O error."""
        super().__init__(operation=operation, message=message)


class CloudErrorKind(str, Enum):
    """Closed set of failure kinds reported by a cloud provider."""

    NOT_IMPLEMENTED = "not_implemented"
    VM_NOT_FOUND = "vm_not_found"
    VM_CREATION_FAILED = "vm_creation_failed"
    CLOUD_ERROR = "cloud_error"
    CPI_EXECUTION_FAILED = "cpi_execution_failed"


class CloudError(DeploymentError):
    """Exception raised by a cloud provider call.

    Callers dispatch on ``kind`` rather than on the exception type.

    Attributes:
        method: Cloud method that failed (e.g. create_vm)
        kind: Failure kind reported by the provider
        ok_to_retry: Whether the provider flagged the call as retryable
    """

    def __init__(
        self,
        method: str,
        message: str,
        kind: CloudErrorKind = CloudErrorKind.CLOUD_ERROR,
        ok_to_retry: bool = False,
    ) -> None:
        """Create a cloud error for a provider method."""
        self.method = method
        self.kind = kind
        self.ok_to_retry = ok_to_retry
        super().__init__(operation=method, message=message)


class ResolutionError(DeploymentError):
    """Exception raised when a VM's network identity cannot be resolved or written."""

    def __init__(self, message: str) -> None:
        """Create a name resolution error."""
        super().__init__(operation="name_resolution", message=message)


class CPINotFoundError(CloudError):
    """Exception raised when a configured CPI executable cannot be found.

    Attributes:
        command: The CPI command that was not found
    """

    def __init__(self, command: str, method: str = "cpi") -> None:
        """Create an error for a missing CPI executable."""
        self.command = command
        super().__init__(
            method=method,
            message=(
                f"CPI executable '{command}' was not found. Install the "
                "provider's CPI and pass its path with --cpi or VMDECK_CPI_COMMAND."
            ),
            kind=CloudErrorKind.CPI_EXECUTION_FAILED,
        )
