"""
DNS DaemonSet reconciler core.

Two pure functions consumed by an external reconciliation loop:

- ``synthesize``: configuration values -> desired DaemonSet
- ``detect_drift``: (live, desired) -> (changed, corrected)
"""

from .config import Config, WorkloadIdentity, DEFAULT_IDENTITY
from .errors import DaemonSetError, InvalidInputError, InconsistentSpecError
from .synthesizer import synthesize, AGENT_CONTAINER, TOOLING_CONTAINER
from .drift_analyzer import DriftResult, detect_drift

__all__ = [
    'Config',
    'WorkloadIdentity',
    'DEFAULT_IDENTITY',
    'DaemonSetError',
    'InvalidInputError',
    'InconsistentSpecError',
    'synthesize',
    'AGENT_CONTAINER',
    'TOOLING_CONTAINER',
    'DriftResult',
    'detect_drift',
]
