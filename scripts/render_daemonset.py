#!/usr/bin/env python3
"""
Render the desired DNS DaemonSet

Prints the DaemonSet the reconciler would converge to, as YAML.
Inputs default to the DNS_* environment variables (a .env file is honoured).

Usage:
    python scripts/render_daemonset.py
    python scripts/render_daemonset.py --cluster-ip 172.30.0.10 --cluster-domain cluster.local
    python scripts/render_daemonset.py --output manifests/dns-daemonset.yaml
"""

import argparse
import sys
from typing import List, Optional

from dotenv import load_dotenv

from dns_daemonset import manifests
from dns_daemonset.config import Config, WorkloadIdentity
from dns_daemonset.errors import DaemonSetError
from dns_daemonset.logging_config import get_script_logger, setup_logging
from dns_daemonset.synthesizer import synthesize

logger = get_script_logger("render_daemonset")


def add_synthesis_arguments(parser: argparse.ArgumentParser, config: Config) -> None:
    """Flags shared by every script that synthesizes the desired DaemonSet."""
    parser.add_argument('--cluster-ip', default=config.cluster_ip,
                        help=f'Cluster DNS service IP (default: {config.cluster_ip})')
    parser.add_argument('--cluster-domain', default=config.cluster_domain,
                        help=f'Cluster DNS domain (default: {config.cluster_domain})')
    parser.add_argument('--coredns-image', default=config.coredns_image,
                        help='CoreDNS image reference')
    parser.add_argument('--cli-image', default=config.cli_image,
                        help='Image running the node resolver')
    parser.add_argument('--name', default=config.workload_name,
                        help=f'DaemonSet name (default: {config.workload_name})')
    parser.add_argument('--namespace', default=config.workload_namespace,
                        help=f'DaemonSet namespace (default: {config.workload_namespace})')
    parser.add_argument('--owner', default=config.workload_owner,
                        help='Owning DNS resource name, used in the selector label')
    parser.add_argument('--log-level', default=config.log_level,
                        help='Logging level (default: LOG_LEVEL or INFO)')


def desired_from_args(args: argparse.Namespace):
    """Synthesize the desired DaemonSet from parsed arguments."""
    identity = WorkloadIdentity(name=args.name, namespace=args.namespace, owner=args.owner)
    return synthesize(args.cluster_ip, args.cluster_domain, args.coredns_image, args.cli_image,
                      identity=identity)


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    config = Config.from_env()

    parser = argparse.ArgumentParser(description="Render the desired DNS DaemonSet as YAML")
    add_synthesis_arguments(parser, config)
    parser.add_argument('--output', '-o', type=str,
                        help='Write the manifest to this file instead of stdout')
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    try:
        desired = desired_from_args(args)
    except DaemonSetError as e:
        logger.error(f"Cannot synthesize DaemonSet: {e}")
        return 2

    if args.output:
        manifests.dump(desired, args.output)
    else:
        sys.stdout.write(manifests.dumps(desired))
    return 0


if __name__ == "__main__":
    sys.exit(main())
