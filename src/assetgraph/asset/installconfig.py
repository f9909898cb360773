"""The install-config asset: the user's description of the cluster."""

from __future__ import annotations

import io
import os
import uuid
from collections.abc import Mapping

import yaml
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from assetgraph import types
from assetgraph.asset.base import Asset, AssetFile, Parents
from assetgraph.asset.persist import FileFetcher
from assetgraph.exceptions import ConfigurationError
from assetgraph.log import logger

logger = logger.getChild(__name__)

INSTALL_CONFIG_FILENAME = "install-config.yaml"

ENV_PREFIX = "ASSETGRAPH_"


class InstallConfig(Asset):
    """Cluster configuration, read from disk or built from the environment."""

    name = "Install Config"

    def __init__(self):
        super().__init__()
        self.config: types.InstallConfig | None = None

    def dependencies(self) -> list[Asset]:
        return []

    def generate(self, parents: Parents) -> None:
        """Build the install config from ``ASSETGRAPH_*`` environment variables.

        Raises:
            ConfigurationError: If a required variable is missing or the
                platform is unknown
        """
        self.config = config_from_env(os.environ)
        self.file_list = [AssetFile(INSTALL_CONFIG_FILENAME, _dump(self.config))]

    def load(self, fetcher: FileFetcher) -> bool:
        file = fetcher.fetch_by_name(INSTALL_CONFIG_FILENAME)
        if file is None:
            return False
        self.config = parse(file.data)
        self.file_list = [file]
        logger.debug("Using %s from the asset directory", INSTALL_CONFIG_FILENAME)
        return True


def parse(data: bytes) -> types.InstallConfig:
    """Parse and validate install-config.yaml contents.

    Raises:
        ConfigurationError: If the YAML is malformed or invalid
    """
    try:
        parsed = YAML(typ="safe").load(io.BytesIO(data))
    except YAMLError as e:
        raise ConfigurationError(f"failed to parse {INSTALL_CONFIG_FILENAME}: {e}") from e
    config = types.InstallConfig.from_dict(parsed)
    config.platform.name()
    return config


def config_from_env(environ: Mapping[str, str]) -> types.InstallConfig:
    """Build an InstallConfig from ``ASSETGRAPH_*`` variables.

    Args:
        environ: Environment mapping (usually ``os.environ``)

    Returns:
        InstallConfig; the cluster ID is a random UUID unless
        ASSETGRAPH_CLUSTER_ID is set
    """

    def env(key: str) -> str | None:
        return environ.get(ENV_PREFIX + key) or None

    def require(key: str) -> str:
        value = env(key)
        if value is None:
            raise ConfigurationError(f"{ENV_PREFIX}{key} must be set")
        return value

    name = require("CLUSTER_NAME")
    platform_name = require("PLATFORM").lower()

    platform = types.Platform()
    if platform_name == "aws":
        platform.aws = types.AWSPlatform(region=require("AWS_REGION"))
    elif platform_name == "openstack":
        platform.openstack = types.OpenStackPlatform(
            region=require("OPENSTACK_REGION"),
            cloud=env("OPENSTACK_CLOUD"),
            external_network=env("OPENSTACK_EXTERNAL_NETWORK"),
        )
    elif platform_name == "libvirt":
        platform.libvirt = types.LibvirtPlatform(uri=require("LIBVIRT_URI"))
    else:
        raise ConfigurationError(
            f"unknown platform {platform_name!r}; expected one of {', '.join(types.PLATFORMS)}"
        )

    return types.InstallConfig(
        name=name,
        cluster_id=env("CLUSTER_ID") or str(uuid.uuid4()),
        base_domain=env("BASE_DOMAIN") or "",
        ssh_key=env("SSH_KEY"),
        platform=platform,
    )


def _dump(config: types.InstallConfig) -> bytes:
    return yaml.safe_dump(config.to_dict(), sort_keys=False, default_flow_style=False).encode()
