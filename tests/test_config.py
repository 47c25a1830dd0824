"""Unit tests for configuration."""

from dataclasses import fields

import pytest

from dns_daemonset.config import DAEMONSET_LABEL, ENV_DEFAULTS, Config, WorkloadIdentity


class TestConfig:
    """Test Config loading and validation."""

    def test_from_env(self, monkeypatch):
        """Test every DNS_* variable is picked up."""
        monkeypatch.setenv("DNS_CLUSTER_IP", "10.0.0.10")
        monkeypatch.setenv("DNS_CLUSTER_DOMAIN", "example.internal")
        monkeypatch.setenv("DNS_COREDNS_IMAGE", "coredns:1")
        monkeypatch.setenv("DNS_CLI_IMAGE", "cli:1")
        monkeypatch.setenv("DNS_WORKLOAD_NAME", "dns-edge")
        monkeypatch.setenv("DNS_WORKLOAD_NAMESPACE", "edge")
        monkeypatch.setenv("DNS_WORKLOAD_OWNER", "edge")

        config = Config.from_env()

        assert config.cluster_ip == "10.0.0.10"
        assert config.cluster_domain == "example.internal"
        assert config.coredns_image == "coredns:1"
        assert config.cli_image == "cli:1"
        assert config.identity == WorkloadIdentity(name="dns-edge", namespace="edge", owner="edge")

    def test_defaults_without_environment(self, monkeypatch):
        """Test every field has one environment variable and falls back to its default."""
        assert sorted(ENV_DEFAULTS) == sorted(f.name for f in fields(Config))
        for var, _ in ENV_DEFAULTS.values():
            monkeypatch.delenv(var, raising=False)

        config = Config.from_env()

        assert config.cluster_ip == "172.30.0.10"
        assert config.log_level == "INFO"
        assert config.identity == WorkloadIdentity()

    def test_validate_reports_missing(self):
        """Test empty required values are listed."""
        config = Config(cluster_ip="", cli_image="")
        with pytest.raises(ValueError, match="cluster_ip"):
            config.validate()

    def test_validate_accepts_defaults(self):
        """Test the defaults are a complete configuration."""
        Config().validate()


class TestWorkloadIdentity:
    """Test WorkloadIdentity."""

    def test_selector_labels(self):
        """Test the binding label uses the owner name."""
        assert WorkloadIdentity(owner="edge").selector_labels == {DAEMONSET_LABEL: "edge"}

    def test_immutable(self):
        """Test identities cannot be changed after creation."""
        identity = WorkloadIdentity()
        with pytest.raises(AttributeError):
            identity.name = "other"
