"""Shared fixtures for the DNS DaemonSet tests."""

import pytest
from kubernetes.client import (
    V1Container,
    V1DaemonSet,
    V1DaemonSetSpec,
    V1LabelSelector,
    V1ObjectMeta,
    V1PodSpec,
    V1PodTemplateSpec,
)

from dns_daemonset import synthesize


@pytest.fixture
def inputs():
    """Synthesizer inputs used throughout the suite."""
    return {
        "cluster_ip": "172.30.77.10",
        "cluster_domain": "cluster.local",
        "agent_image": "quay.io/openshift/coredns:test",
        "tooling_image": "openshift/origin-cli:test",
    }


@pytest.fixture
def desired(inputs):
    """A freshly synthesized DaemonSet."""
    return synthesize(**inputs)


@pytest.fixture
def original():
    """Minimal live DaemonSet with two containers and a legacy node selector."""
    return V1DaemonSet(
        metadata=V1ObjectMeta(
            name="dns-original",
            namespace="openshift-dns",
            uid="1",
        ),
        spec=V1DaemonSetSpec(
            selector=V1LabelSelector(match_labels={"app": "dns"}),
            template=V1PodTemplateSpec(
                spec=V1PodSpec(
                    containers=[
                        V1Container(
                            name="dns",
                            image="openshift/origin-coredns:v4.0",
                            command=["a", "b"],
                        ),
                        V1Container(
                            name="dns-node-resolver",
                            image="openshift/origin-cli:v4.0",
                            command=["c", "d"],
                        ),
                    ],
                    node_selector={"beta.kubernetes.io/os": "linux"},
                ),
            ),
        ),
    )
