"""
Managed Field Table

Declarative classification of the DaemonSet fields the reconciler owns.
The synthesizer checks its output against this table and the drift analyzer
compares and corrects exactly these fields; everything else on a live object
is left alone.
"""

import copy
import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

# Scopes
POD = "pod"
CONTAINER = "container"

# Comparison rules
SCALAR = "scalar"
SEQUENCE = "sequence"
MAPPING = "mapping"
ENV = "env"
LABEL_SUBSET = "label_subset"

CONTAINERS_PATH = "spec.template.spec.containers"


@dataclass(frozen=True)
class ManagedField:
    """
    One entry of the managed field table.

    Attributes:
        path: Dotted attribute path. Pod-scope paths start at the DaemonSet,
            container-scope paths start at a container.
        scope: POD or CONTAINER
        rule: Comparison rule (SCALAR, SEQUENCE, MAPPING, ENV, LABEL_SUBSET)
        required: The synthesizer must always populate this field
        mutable: False for fields the API server refuses to update in place;
            differences are reported but never written into a correction
    """
    path: str
    scope: str
    rule: str
    required: bool = False
    mutable: bool = True


MANAGED_FIELDS: Tuple[ManagedField, ...] = (
    ManagedField("spec.selector.match_labels", POD, MAPPING, required=True, mutable=False),
    ManagedField("spec.template.metadata.labels", POD, LABEL_SUBSET, required=True),
    ManagedField("spec.template.spec.node_selector", POD, MAPPING, required=True),
    ManagedField("image", CONTAINER, SCALAR, required=True),
    ManagedField("command", CONTAINER, SEQUENCE, required=True),
    ManagedField("args", CONTAINER, SEQUENCE),
    ManagedField("env", CONTAINER, ENV),
)


def pod_fields(mutable: Optional[bool] = None) -> List[ManagedField]:
    """Pod-scope entries, optionally filtered on mutability."""
    return [f for f in MANAGED_FIELDS
            if f.scope == POD and (mutable is None or f.mutable == mutable)]


def container_fields() -> List[ManagedField]:
    """Container-scope entries."""
    return [f for f in MANAGED_FIELDS if f.scope == CONTAINER]


def container_path(name: str, field_path: str) -> str:
    """Report path for a field of a named container, e.g. ``containers[dns].image``."""
    return f"containers[{name}].{field_path}"


# -------- Attribute paths --------
def get_path(obj: Any, path: str) -> Any:
    """Follow a dotted attribute path; a missing intermediate yields None."""
    for attr in path.split("."):
        if obj is None:
            return None
        obj = getattr(obj, attr, None)
    return obj


def set_path(obj: Any, path: str, value: Any, template: Any = None) -> None:
    """
    Set a dotted attribute path on a Kubernetes model.

    Intermediate objects missing on ``obj`` are deep-copied from
    ``template`` (normally the desired DaemonSet).
    """
    attrs = path.split(".")
    for depth, attr in enumerate(attrs[:-1]):
        nxt = getattr(obj, attr, None)
        if nxt is None:
            source = get_path(template, ".".join(attrs[:depth + 1]))
            if source is None:
                raise AttributeError(f"cannot create intermediate '{attr}' for path '{path}'")
            nxt = copy.deepcopy(source)
            setattr(obj, attr, nxt)
        obj = nxt
    setattr(obj, attrs[-1], value)


# -------- Normalization & comparison --------
def _env_entry(var: Any) -> Any:
    value_from = getattr(var, "value_from", None)
    if value_from is not None:
        return {"value_from": value_from.to_dict() if hasattr(value_from, "to_dict") else value_from}
    return var.value or ""


def normalize(rule: str, value: Any) -> Any:
    """
    Canonical comparable form of a managed value.

    Absent and empty collections normalize to the same value so that a
    field the API server drops on round trip never reads as drift.
    """
    if rule == SCALAR:
        return value if value not in (None, "") else None
    if rule == SEQUENCE:
        return list(value or [])
    if rule in (MAPPING, LABEL_SUBSET):
        return dict(value or {})
    if rule == ENV:
        # Sorted by name, keeping repeated names so a shadowing entry is visible
        pairs = [[var.name, _env_entry(var)] for var in (value or [])]
        return sorted(pairs, key=lambda p: (p[0], json.dumps(p[1], sort_keys=True, default=str)))
    raise ValueError(f"unknown comparison rule: {rule}")


def values_equal(rule: str, current: Any, desired: Any) -> bool:
    """Compare a live value against the desired one under ``rule``."""
    cur, des = normalize(rule, current), normalize(rule, desired)
    if rule == LABEL_SUBSET:
        # Only the labels we set are ours; other writers may add their own.
        return all(k in cur and cur[k] == v for k, v in des.items())
    return cur == des


def merge(rule: str, current: Any, desired: Any) -> Any:
    """Value written into a correction for a field that drifted."""
    if rule == LABEL_SUBSET:
        merged = dict(current or {})
        merged.update(desired or {})
        return merged
    return copy.deepcopy(desired)


def unpopulated_fields(daemonset: Any) -> List[str]:
    """
    Required managed fields left empty on a DaemonSet.

    Returns:
        List of report paths, empty when every required field is set
    """
    missing: List[str] = []
    for f in MANAGED_FIELDS:
        if not f.required:
            continue
        if f.scope == POD:
            if not normalize(f.rule, get_path(daemonset, f.path)):
                missing.append(f.path)
            continue
        for c in get_path(daemonset, CONTAINERS_PATH) or []:
            if not normalize(f.rule, get_path(c, f.path)):
                missing.append(container_path(c.name, f.path))
    return missing


def describe() -> Dict[str, Dict[str, Any]]:
    """Table as plain data, keyed by path (used by the tooling scripts)."""
    return {
        f.path: {"scope": f.scope, "rule": f.rule, "required": f.required, "mutable": f.mutable}
        for f in MANAGED_FIELDS
    }
