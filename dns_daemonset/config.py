"""Configuration management for the DNS DaemonSet reconciler."""

import os
from dataclasses import dataclass

# Label binding pods to the DaemonSet that manages them
DAEMONSET_LABEL = "dns.operator.openshift.io/daemonset-dns"

DEFAULT_WORKLOAD_NAME = "dns-default"
DEFAULT_WORKLOAD_NAMESPACE = "openshift-dns"


@dataclass(frozen=True)
class WorkloadIdentity:
    """
    Fixed identity of the managed DaemonSet.

    Passed explicitly into the synthesizer so that the pure functions never
    depend on module-level constants.

    Attributes:
        name: DaemonSet name (e.g. "dns-default")
        namespace: Namespace the DaemonSet lives in
        owner: Value of the selector-binding label, normally the name of the
            DNS resource owning the DaemonSet
    """
    name: str = DEFAULT_WORKLOAD_NAME
    namespace: str = DEFAULT_WORKLOAD_NAMESPACE
    owner: str = "default"

    @property
    def selector_labels(self) -> dict:
        """Labels used both as the DaemonSet selector and on the pod template."""
        return {DAEMONSET_LABEL: self.owner}

    @property
    def config_map_name(self) -> str:
        """The Corefile ConfigMap shares the DaemonSet's name."""
        return self.name


DEFAULT_IDENTITY = WorkloadIdentity()


# Config field -> (environment variable, default)
ENV_DEFAULTS = {
    "cluster_ip": ("DNS_CLUSTER_IP", "172.30.0.10"),
    "cluster_domain": ("DNS_CLUSTER_DOMAIN", "cluster.local"),
    "coredns_image": ("DNS_COREDNS_IMAGE", "quay.io/openshift/origin-coredns:latest"),
    "cli_image": ("DNS_CLI_IMAGE", "quay.io/openshift/origin-cli:latest"),
    "workload_name": ("DNS_WORKLOAD_NAME", DEFAULT_WORKLOAD_NAME),
    "workload_namespace": ("DNS_WORKLOAD_NAMESPACE", DEFAULT_WORKLOAD_NAMESPACE),
    "workload_owner": ("DNS_WORKLOAD_OWNER", "default"),
    "log_level": ("LOG_LEVEL", "INFO"),
}


def _getenv(field_name: str) -> str:
    var, default = ENV_DEFAULTS[field_name]
    return os.getenv(var, default)


@dataclass
class Config:
    """Central configuration for the synthesizer and the tooling scripts."""

    # Synthesizer inputs
    cluster_ip: str = _getenv("cluster_ip")
    cluster_domain: str = _getenv("cluster_domain")
    coredns_image: str = _getenv("coredns_image")
    cli_image: str = _getenv("cli_image")

    # Workload identity
    workload_name: str = _getenv("workload_name")
    workload_namespace: str = _getenv("workload_namespace")
    workload_owner: str = _getenv("workload_owner")

    # Logging
    log_level: str = _getenv("log_level")

    @classmethod
    def from_env(cls) -> "Config":
        """
        Build a Config from the current process environment.

        Class-level defaults are evaluated at import time, so this re-reads
        every variable (useful after ``load_dotenv()`` has run).
        """
        return cls(**{name: _getenv(name) for name in ENV_DEFAULTS})

    def validate(self) -> None:
        """Validate configuration and raise errors for missing required values."""
        required_fields = [
            ("cluster_ip", self.cluster_ip),
            ("cluster_domain", self.cluster_domain),
            ("coredns_image", self.coredns_image),
            ("cli_image", self.cli_image),
            ("workload_name", self.workload_name),
            ("workload_namespace", self.workload_namespace),
        ]

        missing = [name for name, value in required_fields if not value]
        if missing:
            raise ValueError(f"Missing required configuration fields: {missing}")

    @property
    def identity(self) -> WorkloadIdentity:
        """Workload identity described by this configuration."""
        return WorkloadIdentity(
            name=self.workload_name,
            namespace=self.workload_namespace,
            owner=self.workload_owner,
        )
