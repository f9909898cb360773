"""Named assets that can be requested from the CLI."""

from assetgraph.asset.base import Asset
from assetgraph.asset.cluster import Cluster
from assetgraph.asset.installconfig import InstallConfig
from assetgraph.asset.kubeconfig import AdminKubeconfig
from assetgraph.asset.tfvars import TerraformVariables

TARGETS: dict[str, type[Asset]] = {
    "install-config": InstallConfig,
    "terraform-vars": TerraformVariables,
    "admin-kubeconfig": AdminKubeconfig,
    "cluster": Cluster,
}


def get_target(name: str) -> Asset:
    """Instantiate the asset registered under ``name``.

    Raises:
        KeyError: If ``name`` isn't a known target
    """
    try:
        return TARGETS[name]()
    except KeyError:
        raise KeyError(f"unknown target {name!r}; choose from {', '.join(TARGETS)}") from None
