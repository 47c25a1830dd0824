"""
Desired-State Synthesizer

Builds the canonical DNS DaemonSet from four configuration values:
the cluster DNS service IP, the cluster domain, the CoreDNS image and the
image providing the node resolver tooling.

The result is rebuilt from literals on every call, so equal inputs always
produce equal objects and reconciliation converges.
"""

import copy
import ipaddress
import logging
from typing import Optional

from kubernetes.client import (
    V1ConfigMapVolumeSource,
    V1Container,
    V1ContainerPort,
    V1DaemonSet,
    V1DaemonSetSpec,
    V1DaemonSetUpdateStrategy,
    V1EnvVar,
    V1HostPathVolumeSource,
    V1HTTPGetAction,
    V1KeyToPath,
    V1LabelSelector,
    V1ObjectMeta,
    V1OwnerReference,
    V1PodSpec,
    V1PodTemplateSpec,
    V1Probe,
    V1ResourceRequirements,
    V1RollingUpdateDaemonSet,
    V1SecurityContext,
    V1Toleration,
    V1Volume,
    V1VolumeMount,
)

from . import managed_fields
from .config import DEFAULT_IDENTITY, WorkloadIdentity
from .errors import InconsistentSpecError, InvalidInputError

logger = logging.getLogger(__name__)

# Container names double as join keys for drift detection; never rename them.
AGENT_CONTAINER = "dns"
TOOLING_CONTAINER = "dns-node-resolver"

OWNING_LABEL = "dns.operator.openshift.io/owning-dns"

NODE_SELECTOR = {"kubernetes.io/os": "linux"}

# Services whose addresses the node resolver pins into the node's /etc/hosts
RESOLVER_SERVICES = "image-registry.openshift-image-registry.svc"

COREFILE_DIR = "/etc/coredns"

NODE_RESOLVER_SCRIPT = """#!/bin/bash
set -uo pipefail

trap 'jobs -p | xargs --no-run-if-empty kill || true; wait; exit 0' TERM

MARKER="openshift-generated-node-resolver"
HOSTS_FILE="/etc/hosts"
TEMP_FILE="/etc/hosts.tmp"

IFS=', ' read -r -a services <<< "${SERVICES}"

# Keep the original file's ownership and mode on every rewrite
cp -f --attributes-only "${HOSTS_FILE}" "${TEMP_FILE}"

while true; do
  declare -A svc_ips
  for svc in "${services[@]}"; do
    ips=($(dig -t A +short "@${NAMESERVER}" "${svc}.${CLUSTER_DOMAIN}" 2>/dev/null | grep -E '^[0-9.]+$'))
    if [[ ${#ips[@]} -ne 0 ]]; then
      svc_ips["${svc}"]="${ips[*]}"
    fi
  done

  sed --silent "/# ${MARKER}/d; w ${TEMP_FILE}" "${HOSTS_FILE}"
  for svc in "${!svc_ips[@]}"; do
    for ip in ${svc_ips[${svc}]}; do
      echo "${ip} ${svc} ${svc}.${CLUSTER_DOMAIN} # ${MARKER}" >> "${TEMP_FILE}"
    done
  done

  if ! cmp -s "${TEMP_FILE}" "${HOSTS_FILE}"; then
    cp -f "${TEMP_FILE}" "${HOSTS_FILE}"
  fi
  unset svc_ips
  sleep 60 & wait
done
"""


def _require_text(field: str, value) -> str:
    if not isinstance(value, str):
        raise InvalidInputError(field, value, "must be a string")
    if not value.strip():
        raise InvalidInputError(field, value, "must not be empty")
    return value


def validate_inputs(cluster_ip, cluster_domain, agent_image, tooling_image,
                    identity: WorkloadIdentity = DEFAULT_IDENTITY) -> None:
    """
    Check synthesizer inputs.

    Raises:
        InvalidInputError: on the first empty or malformed input
    """
    _require_text("cluster_ip", cluster_ip)
    try:
        ipaddress.ip_address(cluster_ip)
    except ValueError:
        raise InvalidInputError("cluster_ip", cluster_ip, "not a valid IP address") from None
    _require_text("cluster_domain", cluster_domain)
    _require_text("agent_image", agent_image)
    _require_text("tooling_image", tooling_image)
    _require_text("identity.name", identity.name)
    _require_text("identity.namespace", identity.namespace)
    _require_text("identity.owner", identity.owner)


def _agent_container(image: str) -> V1Container:
    return V1Container(
        name=AGENT_CONTAINER,
        image=image,
        image_pull_policy="IfNotPresent",
        command=["coredns"],
        args=["-conf", f"{COREFILE_DIR}/Corefile"],
        volume_mounts=[
            V1VolumeMount(name="config-volume", mount_path=COREFILE_DIR, read_only=True),
        ],
        ports=[
            V1ContainerPort(name="dns", container_port=5353, protocol="UDP"),
            V1ContainerPort(name="dns-tcp", container_port=5353, protocol="TCP"),
            V1ContainerPort(name="metrics", container_port=9153, protocol="TCP"),
        ],
        readiness_probe=V1Probe(
            http_get=V1HTTPGetAction(path="/health", port=8080, scheme="HTTP"),
            initial_delay_seconds=10,
            period_seconds=3,
            timeout_seconds=3,
            success_threshold=1,
            failure_threshold=3,
        ),
        liveness_probe=V1Probe(
            http_get=V1HTTPGetAction(path="/health", port=8080, scheme="HTTP"),
            initial_delay_seconds=60,
            timeout_seconds=5,
            success_threshold=1,
            failure_threshold=5,
        ),
        resources=V1ResourceRequirements(requests={"cpu": "100m", "memory": "70Mi"}),
        termination_message_policy="FallbackToLogsOnError",
    )


def _tooling_container(image: str, cluster_ip: str, cluster_domain: str) -> V1Container:
    return V1Container(
        name=TOOLING_CONTAINER,
        image=image,
        image_pull_policy="IfNotPresent",
        command=["/bin/bash", "-c", NODE_RESOLVER_SCRIPT],
        env=[
            V1EnvVar(name="SERVICES", value=RESOLVER_SERVICES),
            V1EnvVar(name="NAMESERVER", value=cluster_ip),
            V1EnvVar(name="CLUSTER_DOMAIN", value=cluster_domain),
        ],
        volume_mounts=[
            V1VolumeMount(name="hosts-file", mount_path="/etc/hosts"),
        ],
        security_context=V1SecurityContext(privileged=True),
        resources=V1ResourceRequirements(requests={"cpu": "5m", "memory": "21Mi"}),
        termination_message_policy="FallbackToLogsOnError",
    )


def _volumes(identity: WorkloadIdentity):
    return [
        V1Volume(
            name="config-volume",
            config_map=V1ConfigMapVolumeSource(
                name=identity.config_map_name,
                items=[V1KeyToPath(key="Corefile", path="Corefile")],
            ),
        ),
        V1Volume(
            name="hosts-file",
            host_path=V1HostPathVolumeSource(path="/etc/hosts", type="File"),
        ),
    ]


def synthesize(cluster_ip: str,
               cluster_domain: str,
               agent_image: str,
               tooling_image: str,
               identity: WorkloadIdentity = DEFAULT_IDENTITY,
               owner: Optional[V1OwnerReference] = None) -> V1DaemonSet:
    """
    Build the desired DNS DaemonSet.

    Args:
        cluster_ip: IP address of the cluster DNS service (IPv4 or IPv6)
        cluster_domain: Cluster DNS domain, e.g. "cluster.local"
        agent_image: CoreDNS image reference
        tooling_image: Image running the node resolver script
        identity: Name, namespace and owner label of the DaemonSet
        owner: Optional owner reference attached to the DaemonSet metadata

    Returns:
        A new V1DaemonSet with the ``dns`` and ``dns-node-resolver``
        containers, in that order

    Raises:
        InvalidInputError: if any input is empty or malformed
    """
    validate_inputs(cluster_ip, cluster_domain, agent_image, tooling_image, identity)

    metadata = V1ObjectMeta(
        name=identity.name,
        namespace=identity.namespace,
        labels={OWNING_LABEL: identity.owner},
    )
    if owner is not None:
        metadata.owner_references = [copy.deepcopy(owner)]

    daemonset = V1DaemonSet(
        api_version="apps/v1",
        kind="DaemonSet",
        metadata=metadata,
        spec=V1DaemonSetSpec(
            selector=V1LabelSelector(match_labels=identity.selector_labels),
            template=V1PodTemplateSpec(
                metadata=V1ObjectMeta(labels=identity.selector_labels),
                spec=V1PodSpec(
                    service_account_name="dns",
                    priority_class_name="system-node-critical",
                    dns_policy="Default",
                    node_selector=dict(NODE_SELECTOR),
                    tolerations=[V1Toleration(operator="Exists")],
                    containers=[
                        _agent_container(agent_image),
                        _tooling_container(tooling_image, cluster_ip, cluster_domain),
                    ],
                    volumes=_volumes(identity),
                ),
            ),
            update_strategy=V1DaemonSetUpdateStrategy(
                type="RollingUpdate",
                rolling_update=V1RollingUpdateDaemonSet(max_unavailable="10%"),
            ),
        ),
    )

    missing = managed_fields.unpopulated_fields(daemonset)
    if missing:
        raise InconsistentSpecError(f"synthesized DaemonSet leaves managed fields unset: {missing}")

    logger.debug(f"Synthesized DaemonSet {identity.namespace}/{identity.name} "
                 f"(nameserver={cluster_ip}, domain={cluster_domain})")
    return daemonset
