from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Tuple

from kubernetes.client import V1Container, V1DaemonSet

from .. import managed_fields as mf
from ..errors import InconsistentSpecError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DriftResult:
    """
    Outcome of comparing a live DaemonSet with the desired one.

    Unpacks as ``changed, corrected`` so callers can write
    ``changed, corrected = detect_drift(current, desired)``.

    Attributes:
        changed: True iff a mutable managed field differs
        corrected: Copy of the live DaemonSet with managed fields taken from
            the desired one; equal to the live object when nothing changed
        changes: Structural report ``{"added", "removed", "changed"}``
        selector_mismatch: Immutable managed paths that differ; the object
            has to be recreated to fix these
    """
    changed: bool
    corrected: V1DaemonSet
    changes: Dict[str, Any] = field(default_factory=dict)
    selector_mismatch: List[str] = field(default_factory=list)

    def __iter__(self) -> Iterator[Any]:
        yield self.changed
        yield self.corrected


# -------- Container indexing --------
def _containers(ds: V1DaemonSet) -> List[V1Container]:
    return list(mf.get_path(ds, mf.CONTAINERS_PATH) or [])


def _index(containers: List[V1Container], which: str) -> Dict[str, V1Container]:
    out: Dict[str, V1Container] = {}
    for c in containers:
        if c.name in out:
            raise InconsistentSpecError(f"{which} DaemonSet has duplicate container name '{c.name}'",
                                        path=mf.container_path(c.name, "name"))
        out[c.name] = c
    return out


# -------- Comparisons --------
def _pod_diff(current: V1DaemonSet, desired: V1DaemonSet, fields: List[mf.ManagedField]) -> Dict[str, Dict[str, Any]]:
    changed: Dict[str, Dict[str, Any]] = {}
    for f in fields:
        cv, dv = mf.get_path(current, f.path), mf.get_path(desired, f.path)
        if not mf.values_equal(f.rule, cv, dv):
            changed[f.path] = {"from": mf.normalize(f.rule, cv), "to": mf.normalize(f.rule, dv)}
    return changed


def _container_diff(cur: V1Container, des: V1Container) -> Dict[str, Dict[str, Any]]:
    changed: Dict[str, Dict[str, Any]] = {}
    for f in mf.container_fields():
        cv, dv = mf.get_path(cur, f.path), mf.get_path(des, f.path)
        if not mf.values_equal(f.rule, cv, dv):
            changed[mf.container_path(des.name, f.path)] = {
                "from": mf.normalize(f.rule, cv), "to": mf.normalize(f.rule, dv)
            }
    return changed


def _structural(c_map: Dict[str, V1Container], d_map: Dict[str, V1Container]) -> Tuple[List[str], List[str]]:
    added = [n for n in d_map if n not in c_map]
    removed = [n for n in c_map if n not in d_map]
    return added, removed


# -------- Correction --------
def _correct_containers(corrected: V1DaemonSet, desired: V1DaemonSet) -> None:
    """Rebuild the container list in desired order, keeping unmanaged container fields."""
    live = _index(_containers(corrected), "current")
    rebuilt: List[V1Container] = []
    for des in _containers(desired):
        cur = live.get(des.name)
        if cur is None:
            rebuilt.append(copy.deepcopy(des))
            continue
        for f in mf.container_fields():
            cv, dv = mf.get_path(cur, f.path), mf.get_path(des, f.path)
            if not mf.values_equal(f.rule, cv, dv):
                mf.set_path(cur, f.path, mf.merge(f.rule, cv, dv))
        rebuilt.append(cur)
    mf.set_path(corrected, mf.CONTAINERS_PATH, rebuilt, template=desired)


def detect_drift(current: V1DaemonSet, desired: V1DaemonSet) -> DriftResult:
    """
    Compare the managed fields of a live DaemonSet against the desired one.

    Containers are matched by name, never by position. Neither argument is
    modified; the correction is built on a deep copy of ``current``.

    Args:
        current: DaemonSet as read from the cluster
        desired: Freshly synthesized DaemonSet

    Returns:
        DriftResult; ``detect_drift(result.corrected, desired).changed`` is
        always False

    Raises:
        InconsistentSpecError: if either DaemonSet repeats a container name
    """
    c_map = _index(_containers(current), "current")
    d_map = _index(_containers(desired), "desired")

    pod_changed = _pod_diff(current, desired, mf.pod_fields(mutable=True))
    immutable = _pod_diff(current, desired, mf.pod_fields(mutable=False))

    added, removed = _structural(c_map, d_map)
    container_changed: Dict[str, Dict[str, Any]] = {}
    for name, des in d_map.items():
        if name in c_map:
            container_changed.update(_container_diff(c_map[name], des))

    changes = {
        "added": added,
        "removed": removed,
        "changed": {**pod_changed, **container_changed},
    }
    changed = bool(added or removed or changes["changed"])

    ident = _describe(current)
    if immutable:
        logger.warning(f"DaemonSet {ident} has immutable field drift {sorted(immutable)}; "
                       "it must be recreated to converge")

    corrected = copy.deepcopy(current)
    if not changed:
        logger.debug(f"DaemonSet {ident} is in sync")
        return DriftResult(False, corrected, changes, sorted(immutable))

    for f in mf.pod_fields(mutable=True):
        if f.path in pod_changed:
            mf.set_path(corrected, f.path,
                        mf.merge(f.rule, mf.get_path(corrected, f.path), mf.get_path(desired, f.path)),
                        template=desired)
    if added or removed or container_changed:
        _correct_containers(corrected, desired)

    logger.info(f"DaemonSet {ident} drifted: added={added} removed={removed} "
                f"changed={sorted(changes['changed'])}")
    for path, delta in changes["changed"].items():
        logger.debug(f"  {path}: {delta['from']!r} -> {delta['to']!r}")

    return DriftResult(True, corrected, changes, sorted(immutable))


def _describe(ds: V1DaemonSet) -> str:
    meta = getattr(ds, "metadata", None)
    if meta is None:
        return "<unnamed>"
    return f"{meta.namespace or '-'}/{meta.name or '-'}"
