"""Administrator kubeconfig for the cluster being launched."""

from __future__ import annotations

import secrets

import yaml

from assetgraph.asset.base import Asset, AssetFile, Parents
from assetgraph.asset.installconfig import InstallConfig
from assetgraph.asset.persist import FileFetcher

KUBECONFIG_FILENAME = "auth/kubeconfig"


def api_server_url(cluster_name: str, base_domain: str) -> str:
    host = f"{cluster_name}-api.{base_domain}" if base_domain else f"{cluster_name}-api"
    return f"https://{host}:6443"


class AdminKubeconfig(Asset):
    """Credentials for the ``admin`` user, written to ``auth/kubeconfig``."""

    name = "Kubeconfig Admin"

    def dependencies(self) -> list[Asset]:
        return [InstallConfig()]

    def generate(self, parents: Parents) -> None:
        config = parents.get(InstallConfig).config
        kubeconfig = {
            "apiVersion": "v1",
            "kind": "Config",
            "clusters": [
                {
                    "name": config.name,
                    "cluster": {"server": api_server_url(config.name, config.base_domain)},
                }
            ],
            "users": [{"name": "admin", "user": {"token": secrets.token_urlsafe(32)}}],
            "contexts": [{"name": "admin", "context": {"cluster": config.name, "user": "admin"}}],
            "current-context": "admin",
            "preferences": {},
        }
        data = yaml.safe_dump(kubeconfig, sort_keys=False, default_flow_style=False)
        self.file_list = [AssetFile(KUBECONFIG_FILENAME, data.encode())]

    def load(self, fetcher: FileFetcher) -> bool:
        file = fetcher.fetch_by_name(KUBECONFIG_FILENAME)
        if file is None:
            return False
        self.file_list = [file]
        return True
