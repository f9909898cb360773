"""Tests for the install-config, terraform variables and kubeconfig assets."""

import json
import uuid

import pytest
import yaml

from assetgraph.asset.base import Parents
from assetgraph.asset.installconfig import (
    INSTALL_CONFIG_FILENAME,
    InstallConfig,
    config_from_env,
    parse,
)
from assetgraph.asset.kubeconfig import KUBECONFIG_FILENAME, AdminKubeconfig, api_server_url
from assetgraph.asset.persist import DiskFileFetcher
from assetgraph.asset.tfvars import TFVARS_FILENAME, TerraformVariables
from assetgraph.exceptions import ConfigurationError

AWS_YAML = b"""\
name: demo
clusterID: 6d1f3c1e-3b7b-4c1e-8d35-3b9f6c0d0a10
baseDomain: example.com
platform:
  aws:
    region: us-test-1
"""


def resolved_install_config(data: bytes = AWS_YAML) -> Parents:
    asset = InstallConfig()
    asset.config = parse(data)
    return Parents({InstallConfig: asset})


class TestParse:
    """Tests for parsing install-config.yaml."""

    def test_aws(self):
        """Test a minimal AWS config."""
        config = parse(AWS_YAML)

        assert config.name == "demo"
        assert config.base_domain == "example.com"
        assert config.platform.name() == "aws"
        assert config.platform.aws.region == "us-test-1"

    def test_openstack(self):
        """Test OpenStack optional fields."""
        config = parse(
            b"name: os\nclusterID: abc\nplatform:\n"
            b"  openstack:\n    region: RegionOne\n    cloud: mycloud\n    externalNetwork: public\n"
        )

        assert config.platform.name() == "openstack"
        assert config.platform.openstack.cloud == "mycloud"
        assert config.platform.openstack.external_network == "public"

    def test_no_platform(self):
        """Test a config without any platform section."""
        with pytest.raises(ConfigurationError, match="no known platform"):
            parse(b"name: demo\nclusterID: abc\nplatform: {}\n")

    def test_multiple_platforms(self):
        """Test two platform sections are rejected."""
        with pytest.raises(ConfigurationError, match="multiple platforms"):
            parse(
                b"name: demo\nclusterID: abc\nplatform:\n"
                b"  aws:\n    region: us-east-1\n  libvirt:\n    URI: qemu:///system\n"
            )

    def test_unknown_platform(self):
        """Test unknown platform keys are rejected."""
        with pytest.raises(ConfigurationError, match="unknown platform"):
            parse(b"name: demo\nclusterID: abc\nplatform:\n  gcp:\n    region: x\n")

    def test_missing_name(self):
        """Test required top-level fields."""
        with pytest.raises(ConfigurationError, match="'name'"):
            parse(b"clusterID: abc\nplatform:\n  aws:\n    region: us-east-1\n")

    def test_missing_region(self):
        """Test required platform fields."""
        with pytest.raises(ConfigurationError, match="platform.aws: missing required field 'region'"):
            parse(b"name: demo\nclusterID: abc\nplatform:\n  aws: {}\n")

    def test_malformed_yaml(self):
        """Test YAML syntax errors become configuration errors."""
        with pytest.raises(ConfigurationError, match="failed to parse"):
            parse(b"name: [unclosed\n")

    def test_not_a_mapping(self):
        """Test a YAML list is rejected."""
        with pytest.raises(ConfigurationError, match="must be a mapping"):
            parse(b"- a\n- b\n")


class TestConfigFromEnv:
    """Tests for building the install config from environment variables."""

    def test_aws(self):
        """Test AWS config from variables."""
        config = config_from_env({
            "ASSETGRAPH_CLUSTER_NAME": "demo",
            "ASSETGRAPH_PLATFORM": "AWS",
            "ASSETGRAPH_AWS_REGION": "us-test-1",
            "ASSETGRAPH_BASE_DOMAIN": "example.com",
            "ASSETGRAPH_CLUSTER_ID": "fixed-id",
        })

        assert config.name == "demo"
        assert config.cluster_id == "fixed-id"
        assert config.platform.aws.region == "us-test-1"

    def test_random_cluster_id(self):
        """Test a UUID is generated when no cluster ID is given."""
        config = config_from_env({
            "ASSETGRAPH_CLUSTER_NAME": "demo",
            "ASSETGRAPH_PLATFORM": "libvirt",
            "ASSETGRAPH_LIBVIRT_URI": "qemu:///system",
        })

        assert uuid.UUID(config.cluster_id).version == 4
        assert config.platform.libvirt.uri == "qemu:///system"

    def test_missing_name(self):
        """Test the cluster name is required."""
        with pytest.raises(ConfigurationError, match="ASSETGRAPH_CLUSTER_NAME must be set"):
            config_from_env({"ASSETGRAPH_PLATFORM": "aws"})

    def test_missing_platform_field(self):
        """Test per-platform fields are required."""
        with pytest.raises(ConfigurationError, match="ASSETGRAPH_AWS_REGION must be set"):
            config_from_env({"ASSETGRAPH_CLUSTER_NAME": "demo", "ASSETGRAPH_PLATFORM": "aws"})

    def test_unknown_platform(self):
        """Test an unsupported platform name."""
        with pytest.raises(ConfigurationError, match="unknown platform 'gcp'"):
            config_from_env({"ASSETGRAPH_CLUSTER_NAME": "demo", "ASSETGRAPH_PLATFORM": "gcp"})


class TestInstallConfigAsset:
    """Tests for the InstallConfig asset."""

    def test_load_from_disk(self, tmp_path):
        """Test an on-disk config hydrates the asset."""
        (tmp_path / INSTALL_CONFIG_FILENAME).write_bytes(AWS_YAML)
        asset = InstallConfig()

        assert asset.load(DiskFileFetcher(tmp_path)) is True
        assert asset.config.name == "demo"
        assert asset.files()[0].data == AWS_YAML

    def test_load_nothing(self, tmp_path):
        """Test an empty directory isn't found."""
        assert InstallConfig().load(DiskFileFetcher(tmp_path)) is False

    def test_generate_round_trips(self, monkeypatch):
        """Test generated YAML parses back to the same config."""
        monkeypatch.setenv("ASSETGRAPH_CLUSTER_NAME", "demo")
        monkeypatch.setenv("ASSETGRAPH_PLATFORM", "openstack")
        monkeypatch.setenv("ASSETGRAPH_OPENSTACK_REGION", "RegionOne")
        monkeypatch.setenv("ASSETGRAPH_OPENSTACK_EXTERNAL_NETWORK", "public")
        asset = InstallConfig()

        asset.generate(Parents({}))

        [file] = asset.files()
        assert file.filename == INSTALL_CONFIG_FILENAME
        assert parse(file.data) == asset.config


class TestTerraformVariables:
    """Tests for the TerraformVariables asset."""

    def test_aws_variables(self):
        """Test variables for an AWS cluster."""
        asset = TerraformVariables()

        asset.generate(resolved_install_config())

        [file] = asset.files()
        assert file.filename == TFVARS_FILENAME
        assert json.loads(file.data) == {
            "aws_region": "us-test-1",
            "base_domain": "example.com",
            "cluster_id": "6d1f3c1e-3b7b-4c1e-8d35-3b9f6c0d0a10",
            "cluster_name": "demo",
        }

    def test_libvirt_variables(self):
        """Test variables for a libvirt cluster."""
        asset = TerraformVariables()

        asset.generate(resolved_install_config(
            b"name: lv\nclusterID: abc\nplatform:\n  libvirt:\n    URI: qemu:///system\n"
        ))

        assert asset.variables["libvirt_uri"] == "qemu:///system"
        assert "aws_region" not in asset.variables

    def test_load(self, tmp_path):
        """Test variables from a previous run are reused."""
        (tmp_path / TFVARS_FILENAME).write_text('{"cluster_name": "demo"}')
        asset = TerraformVariables()

        assert asset.load(DiskFileFetcher(tmp_path)) is True
        assert asset.variables == {"cluster_name": "demo"}


class TestAdminKubeconfig:
    """Tests for the AdminKubeconfig asset."""

    def test_api_server_url(self):
        """Test the API URL is derived from name and base domain."""
        assert api_server_url("demo", "example.com") == "https://demo-api.example.com:6443"
        assert api_server_url("demo", "") == "https://demo-api:6443"

    def test_generate(self):
        """Test the kubeconfig targets the cluster as admin."""
        asset = AdminKubeconfig()

        asset.generate(resolved_install_config())

        [file] = asset.files()
        assert file.filename == KUBECONFIG_FILENAME
        kubeconfig = yaml.safe_load(file.data)
        assert kubeconfig["current-context"] == "admin"
        assert kubeconfig["clusters"][0]["cluster"]["server"] == "https://demo-api.example.com:6443"
        assert kubeconfig["users"][0]["user"]["token"]

    def test_tokens_differ_between_generations(self):
        """Test each generation mints a new token."""
        first, second = AdminKubeconfig(), AdminKubeconfig()
        first.generate(resolved_install_config())
        second.generate(resolved_install_config())

        assert first.files()[0].data != second.files()[0].data
