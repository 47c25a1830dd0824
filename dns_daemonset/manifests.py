"""YAML manifest conversion for DaemonSet objects used by the tooling scripts."""

import inspect
import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from kubernetes.client import ApiClient, V1DaemonSet

from .errors import InconsistentSpecError

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class _RawResponse:
    """Minimal stand-in for an HTTP response, as expected by older ApiClient.deserialize."""

    def __init__(self, text: str):
        self.data = text


def _takes_content_type(api_client: ApiClient) -> bool:
    # Newer client releases deserialize raw text and require its content type
    return "content_type" in inspect.signature(api_client.deserialize).parameters


def _deserialize(api_client: ApiClient, text: str, response_type: str) -> Any:
    if _takes_content_type(api_client):
        return api_client.deserialize(text, response_type, JSON_CONTENT_TYPE)
    return api_client.deserialize(_RawResponse(text), response_type)


def from_dict(payload: Dict[str, Any]) -> V1DaemonSet:
    """
    Build a V1DaemonSet from a manifest dictionary (camelCase keys).

    Raises:
        InconsistentSpecError: if the document is not a DaemonSet or a
            required field of the object model is missing
    """
    if not isinstance(payload, dict):
        raise InconsistentSpecError(f"manifest must be a mapping, got {type(payload).__name__}")
    kind = payload.get("kind")
    if kind != "DaemonSet":
        raise InconsistentSpecError(f"expected kind DaemonSet, got {kind!r}", path="kind")
    # yaml.safe_load turns RFC 3339 timestamps into datetimes
    text = json.dumps(payload, default=str)
    with ApiClient() as api_client:
        try:
            return _deserialize(api_client, text, "V1DaemonSet")
        except ValueError as e:
            raise InconsistentSpecError(f"manifest is not a valid DaemonSet: {e}") from e


def to_dict(daemonset: V1DaemonSet) -> Dict[str, Any]:
    """Serialize a DaemonSet to its API (camelCase) form, dropping unset fields."""
    with ApiClient() as api_client:
        return api_client.sanitize_for_serialization(daemonset)


def loads(text: str) -> V1DaemonSet:
    """Parse a single YAML or JSON DaemonSet document."""
    try:
        payload = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise InconsistentSpecError(f"manifest is not valid YAML: {e}") from e
    return from_dict(payload)


def load(path: Union[str, Path]) -> V1DaemonSet:
    """Read a DaemonSet manifest from disk."""
    p = Path(path)
    logger.debug(f"Loading DaemonSet manifest from {p}")
    return loads(p.read_text(encoding="utf-8"))


def dumps(daemonset: V1DaemonSet) -> str:
    """Render a DaemonSet as a YAML document."""
    return yaml.safe_dump(to_dict(daemonset), sort_keys=False, default_flow_style=False)


def dump(daemonset: V1DaemonSet, path: Union[str, Path]) -> Path:
    """Write a DaemonSet manifest to disk and return the path written."""
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(dumps(daemonset), encoding="utf-8")
    logger.info(f"Wrote DaemonSet manifest to {p}")
    return p
