"""Terraform variables derived from the install config."""

from __future__ import annotations

import json
from typing import Any

from assetgraph.asset.base import Asset, AssetFile, Parents
from assetgraph.asset.installconfig import InstallConfig
from assetgraph.asset.persist import FileFetcher

TFVARS_FILENAME = "terraform.tfvars"


class TerraformVariables(Asset):
    """``terraform.tfvars`` (JSON) for the selected platform."""

    name = "Terraform Variables"

    def __init__(self):
        super().__init__()
        self.variables: dict[str, Any] = {}

    def dependencies(self) -> list[Asset]:
        return [InstallConfig()]

    def generate(self, parents: Parents) -> None:
        config = parents.get(InstallConfig).config
        platform = config.platform.name()

        variables: dict[str, Any] = {
            "cluster_id": config.cluster_id,
            "cluster_name": config.name,
            "base_domain": config.base_domain,
        }
        if platform == "aws":
            variables["aws_region"] = config.platform.aws.region
        elif platform == "openstack":
            variables["openstack_region"] = config.platform.openstack.region
            if config.platform.openstack.cloud:
                variables["openstack_cloud"] = config.platform.openstack.cloud
            if config.platform.openstack.external_network:
                variables["openstack_external_network"] = config.platform.openstack.external_network
        elif platform == "libvirt":
            variables["libvirt_uri"] = config.platform.libvirt.uri
        if config.ssh_key:
            variables["ssh_key"] = config.ssh_key

        self.variables = variables
        self.file_list = [
            AssetFile(TFVARS_FILENAME, json.dumps(variables, indent=2, sort_keys=True).encode())
        ]

    def load(self, fetcher: FileFetcher) -> bool:
        file = fetcher.fetch_by_name(TFVARS_FILENAME)
        if file is None:
            return False
        self.variables = json.loads(file.data)
        self.file_list = [file]
        return True
