"""Install configuration and cluster metadata types.

``install-config.yaml`` looks like:

```yaml
name: demo
clusterID: 5c1c0a4e-0c4e-4e45-9d5a-5c4c8c6d8d41
baseDomain: example.com
sshKey: ssh-ed25519 AAAA...
platform:
  aws:
    region: us-east-1
```

Exactly one of the ``platform`` sections (aws, openstack, libvirt) must
be set.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from assetgraph.exceptions import ConfigurationError

PLATFORMS = ("aws", "openstack", "libvirt")


@dataclass
class AWSPlatform:
    region: str


@dataclass
class OpenStackPlatform:
    region: str
    cloud: str | None = None
    external_network: str | None = None


@dataclass
class LibvirtPlatform:
    uri: str


@dataclass
class Platform:
    """Platform selection. Sections are mutually exclusive."""

    aws: AWSPlatform | None = None
    openstack: OpenStackPlatform | None = None
    libvirt: LibvirtPlatform | None = None

    def configured(self) -> list[str]:
        """Names of the platform sections that are set."""
        return [name for name in PLATFORMS if getattr(self, name) is not None]

    def name(self) -> str:
        """Classify the platform.

        Raises:
            ConfigurationError: If no section is set ("no known platform"),
                or more than one is
        """
        configured = self.configured()
        if not configured:
            raise ConfigurationError("no known platform")
        if len(configured) > 1:
            raise ConfigurationError(
                f"multiple platforms configured ({', '.join(configured)}); exactly one is allowed"
            )
        return configured[0]

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Platform:
        data = data or {}
        unknown = set(data) - set(PLATFORMS)
        if unknown:
            raise ConfigurationError(f"unknown platform(s): {', '.join(sorted(unknown))}")

        platform = cls()
        if data.get("aws") is not None:
            platform.aws = AWSPlatform(region=_require(data["aws"], "region", "platform.aws"))
        if data.get("openstack") is not None:
            section = data["openstack"]
            platform.openstack = OpenStackPlatform(
                region=_require(section, "region", "platform.openstack"),
                cloud=section.get("cloud"),
                external_network=section.get("externalNetwork"),
            )
        if data.get("libvirt") is not None:
            platform.libvirt = LibvirtPlatform(uri=_require(data["libvirt"], "URI", "platform.libvirt"))
        return platform

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.aws:
            data["aws"] = {"region": self.aws.region}
        if self.openstack:
            section: dict[str, Any] = {"region": self.openstack.region}
            if self.openstack.cloud:
                section["cloud"] = self.openstack.cloud
            if self.openstack.external_network:
                section["externalNetwork"] = self.openstack.external_network
            data["openstack"] = section
        if self.libvirt:
            data["libvirt"] = {"URI": self.libvirt.uri}
        return data


@dataclass
class InstallConfig:
    """User-facing cluster configuration."""

    name: str
    cluster_id: str
    base_domain: str = ""
    ssh_key: str | None = None
    platform: Platform = field(default_factory=Platform)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> InstallConfig:
        """Build and validate an InstallConfig from parsed YAML.

        Raises:
            ConfigurationError: If required fields are missing or malformed
        """
        if not isinstance(data, dict):
            raise ConfigurationError("install config must be a mapping")
        return cls(
            name=_require(data, "name", "install config"),
            cluster_id=_require(data, "clusterID", "install config"),
            base_domain=data.get("baseDomain") or "",
            ssh_key=data.get("sshKey"),
            platform=Platform.from_dict(data.get("platform")),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "name": self.name,
            "clusterID": self.cluster_id,
            "baseDomain": self.base_domain,
        }
        if self.ssh_key:
            data["sshKey"] = self.ssh_key
        data["platform"] = self.platform.to_dict()
        return data


@dataclass
class ClusterMetadata:
    """Identifying information for a launched (or attempted) cluster.

    Serialized to ``metadata.json``; used later to find and tear down the
    cluster's resources.
    """

    cluster_name: str
    platform: str | None = None
    platform_metadata: dict[str, Any] = field(default_factory=dict)

    def set_platform(self, config: InstallConfig) -> None:
        """Fill in platform fields from an install config.

        Raises:
            ConfigurationError: If the platform can't be classified
        """
        platform = config.platform.name()
        if platform == "aws":
            self.platform_metadata = {
                "region": config.platform.aws.region,
                "identifier": {"tectonicClusterID": config.cluster_id},
            }
        elif platform == "openstack":
            self.platform_metadata = {
                "region": config.platform.openstack.region,
                "identifier": {"tectonicClusterID": config.cluster_id},
            }
        elif platform == "libvirt":
            self.platform_metadata = {"uri": config.platform.libvirt.uri}
        self.platform = platform

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"clusterName": self.cluster_name}
        if self.platform:
            data[self.platform] = self.platform_metadata
        return data


def _require(data: Any, key: str, where: str) -> Any:
    if not isinstance(data, dict):
        raise ConfigurationError(f"{where} must be a mapping")
    value = data.get(key)
    if value is None or value == "":
        raise ConfigurationError(f"{where}: missing required field '{key}'")
    return value
