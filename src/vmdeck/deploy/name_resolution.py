"""Local name resolution for newly created VMs.

Some providers hand out hostnames that are not resolvable from the machine
running vmdeck. For those, a hosts file is rewritten after the VM is created
so that subsequent agent communication can use the VM's hostname.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from jinja2 import Template

from vmdeck.lib.errors import ResolutionError
from vmdeck.models.vm import NetworkIdentity

logger = logging.getLogger(__name__)

DEFAULT_HOSTS_FILE = Path("/etc/hosts")

ETC_HOSTS_TEMPLATE = """\
127.0.0.1 localhost
{{ private_ip }} {{ hostname }}
"""


def render_hosts_file(identity: NetworkIdentity) -> str:
    """Render hosts file content mapping the VM's private IP to its hostname."""
    template = Template(ETC_HOSTS_TEMPLATE, keep_trailing_newline=True)
    return template.render(
        private_ip=identity.private_ip,
        hostname=identity.hostname,
    )


class NameResolver(ABC):
    """Sink that makes a VM's hostname resolvable locally."""

    @abstractmethod
    def update(self, identity: NetworkIdentity) -> None:
        """Publish the VM's network identity.

        Raises:
            ResolutionError: If the identity cannot be published.
        """


class NoopNameResolver(NameResolver):
    """Resolver for providers whose hostnames already resolve."""

    def update(self, identity: NetworkIdentity) -> None:
        logger.debug("Skipping local name resolution for %s", identity.hostname)


class HostsFileResolver(NameResolver):
    """Overwrite a hosts file with the VM's hostname mapping."""

    def __init__(self, path: Path = DEFAULT_HOSTS_FILE) -> None:
        self.path = path

    def update(self, identity: NetworkIdentity) -> None:
        content = render_hosts_file(identity)
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise ResolutionError(f"Writing to {self.path}: {exc}") from exc
        logger.info(
            "Mapped %s to %s in %s", identity.hostname, identity.private_ip, self.path
        )
