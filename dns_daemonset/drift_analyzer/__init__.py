"""
Drift Analyzer Module
Compares a live DNS DaemonSet against the synthesized one over the managed
field set and produces a minimal correction.
"""

from .daemonset_drift import (
    DriftResult,
    detect_drift,
)

__all__ = [
    'DriftResult',
    'detect_drift',
]
