#!/usr/bin/env python3
"""
DNS DaemonSet Drift Check

Compares a live DaemonSet manifest (e.g. ``kubectl get ds dns-default -o yaml``)
against the desired one and prints the drift report as YAML.

Exit codes:
    0  in sync
    1  drift detected (the corrected manifest is written with --write-corrected)
    2  invalid input or malformed manifest

Usage:
    python scripts/check_drift.py live.yaml
    kubectl get ds -n openshift-dns dns-default -o yaml | python scripts/check_drift.py -
    python scripts/check_drift.py live.yaml --write-corrected corrected.yaml
    python scripts/check_drift.py --show-managed-fields
"""

import argparse
import sys
from typing import List, Optional

import yaml
from dotenv import load_dotenv

from dns_daemonset import managed_fields, manifests
from dns_daemonset.config import Config
from dns_daemonset.drift_analyzer import detect_drift
from dns_daemonset.errors import DaemonSetError
from dns_daemonset.logging_config import get_script_logger, setup_logging
from scripts.render_daemonset import add_synthesis_arguments, desired_from_args

logger = get_script_logger("check_drift")

EXIT_IN_SYNC = 0
EXIT_DRIFT = 1
EXIT_INVALID = 2


def build_report(result) -> dict:
    """Plain-data drift report, safe for yaml.safe_dump."""
    return {
        "changed": result.changed,
        "added": list(result.changes.get("added", [])),
        "removed": list(result.changes.get("removed", [])),
        "changed_fields": dict(result.changes.get("changed", {})),
        "selector_mismatch": list(result.selector_mismatch),
    }


def main(argv: Optional[List[str]] = None) -> int:
    load_dotenv()
    config = Config.from_env()

    parser = argparse.ArgumentParser(description="Detect drift of a live DNS DaemonSet")
    parser.add_argument('manifest', nargs='?',
                        help="Live DaemonSet manifest (YAML or JSON), '-' for stdin")
    add_synthesis_arguments(parser, config)
    parser.add_argument('--write-corrected', type=str,
                        help='Write the corrected manifest here when drift is found')
    parser.add_argument('--show-managed-fields', action='store_true',
                        help='Print the managed field table and exit')
    args = parser.parse_args(argv)

    setup_logging(args.log_level)

    if args.show_managed_fields:
        sys.stdout.write(yaml.safe_dump(managed_fields.describe(), sort_keys=False))
        return EXIT_IN_SYNC

    if not args.manifest:
        parser.error("a manifest path (or '-') is required")

    try:
        if args.manifest == '-':
            current = manifests.loads(sys.stdin.read())
        else:
            current = manifests.load(args.manifest)
        desired = desired_from_args(args)
        result = detect_drift(current, desired)
    except OSError as e:
        logger.error(f"Cannot read manifest: {e}")
        return EXIT_INVALID
    except DaemonSetError as e:
        logger.error(f"Drift check failed: {e}")
        return EXIT_INVALID

    sys.stdout.write(yaml.safe_dump(build_report(result), sort_keys=False))

    if not result.changed:
        logger.info("DaemonSet is in sync with the desired state")
        return EXIT_IN_SYNC

    if args.write_corrected:
        manifests.dump(result.corrected, args.write_corrected)
    return EXIT_DRIFT


if __name__ == "__main__":
    sys.exit(main())
