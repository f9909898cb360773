"""Launch the cluster's infrastructure with Terraform.

``Cluster`` is the one hazardous asset in the graph: generating it
creates real resources. Its output is the Terraform state file, plus a
``metadata.json`` describing the cluster that is written even when
provisioning fails, so whatever was created can still be found and torn
down.
"""

from __future__ import annotations

import json
import tempfile
from pathlib import Path

from assetgraph import data, terraform, types
from assetgraph.asset.base import Asset, AssetFile, Parents
from assetgraph.asset.installconfig import InstallConfig
from assetgraph.asset.kubeconfig import AdminKubeconfig
from assetgraph.asset.persist import FileFetcher, write_file
from assetgraph.asset.tfvars import TerraformVariables
from assetgraph.exceptions import AlreadyExistsError, ProvisioningError, TerraformError
from assetgraph.log import logger
from assetgraph.types import ClusterMetadata

logger = logger.getChild(__name__)

METADATA_FILENAME = "metadata.json"
STATE_FILENAME = terraform.STATE_FILENAME


class Cluster(Asset):
    """Runs terraform against the generated variables and templates."""

    name = "Cluster"

    def dependencies(self) -> list[Asset]:
        return [
            InstallConfig(),
            TerraformVariables(),
            AdminKubeconfig(),
        ]

    def generate(self, parents: Parents) -> None:
        """Launch the cluster and stage the resulting state file.

        ``metadata.json`` is staged on every exit path. If staging it fails
        while another error is already propagating, the metadata failure
        is logged and the original error wins.

        Raises:
            ConfigurationError: If the platform can't be classified
            ProvisioningError: If terraform init/apply fails, or the state
                file can't be read after a successful apply
        """
        install_config = parents.get(InstallConfig)
        tfvars = parents.get(TerraformVariables)
        config = install_config.config

        with tempfile.TemporaryDirectory(prefix="assetgraph-") as tmp:
            workdir = Path(tmp)

            # Copy terraform.tfvars to the directory terraform will run in
            for file in tfvars.files():
                write_file(workdir, file)

            metadata = ClusterMetadata(cluster_name=config.name)
            try:
                self._launch(workdir, config, metadata)
            except BaseException:
                self._stage_metadata(metadata, primary_failed=True)
                raise
            self._stage_metadata(metadata, primary_failed=False)

    def _launch(self, workdir: Path, config: types.InstallConfig, metadata: ClusterMetadata) -> None:
        metadata.set_platform(config)
        data.unpack(workdir, metadata.platform)

        logger.info("Using Terraform to create cluster...")
        try:
            terraform.init(workdir)
        except TerraformError as e:
            raise ProvisioningError(f"failed to initialize terraform: {e}") from e

        # Stage whatever state apply left behind, however it ended
        state_file = terraform.state_path(workdir)
        applied = False
        apply_error = None
        try:
            state_file = terraform.apply(workdir)
            applied = True
        except TerraformError as e:
            apply_error = e
        finally:
            self._stage_state(state_file, strict=applied)

        if apply_error is not None:
            raise ProvisioningError(f"failed to run terraform: {apply_error}") from apply_error

    def _stage_state(self, state_file: Path, strict: bool) -> None:
        try:
            state = state_file.read_bytes()
        except OSError as e:
            if strict:
                raise ProvisioningError(f"failed to read {STATE_FILENAME}: {e}") from e
            logger.error("Failed to read tfstate: %s", e)
            return
        self.file_list.append(AssetFile(STATE_FILENAME, state))

    def _stage_metadata(self, metadata: ClusterMetadata, primary_failed: bool) -> None:
        try:
            payload = json.dumps(metadata.to_dict()).encode()
        except (TypeError, ValueError) as e:
            if not primary_failed:
                raise ProvisioningError(f"failed to serialize cluster metadata: {e}") from e
            logger.error("Failed to serialize cluster metadata: %s", e)
            return
        self.file_list.append(AssetFile(METADATA_FILENAME, payload))

    def load(self, fetcher: FileFetcher) -> bool:
        """Refuse to relaunch a cluster this directory already launched.

        Raises:
            AlreadyExistsError: If a Terraform state file is on disk
        """
        if fetcher.fetch_by_name(STATE_FILENAME) is not None:
            raise AlreadyExistsError(f'"{STATE_FILENAME}" already exists')
        return False
