"""Snapshot Serializer.

Turns a tracked object into a (file name, YAML bytes) snapshot.

Tracked objects are Kubernetes style unstructured content: a mapping with
``apiVersion``, ``kind`` and arbitrary payload. Objects exposing
``to_dict()`` are accepted as well.

File names are derived from the type descriptor only:

    lowercase("{kind}.{version}.{group}.yaml")

    {"apiVersion": "v1", "kind": "ConfigMap"}         -> configmap.v1..yaml
    {"apiVersion": "apps/v1", "kind": "Deployment"}   -> deployment.v1.apps.yaml
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Mapping, Tuple

import yaml

from .config import PathScheme
from .exceptions import DecodeError


@dataclass(frozen=True)
class ResourceKind:
    """Type descriptor of a tracked object.

    Attributes:
        group: API group ("" for the core group)
        version: API version
        kind: Object kind
    """

    group: str
    version: str
    kind: str

    @classmethod
    def from_api_version(cls, api_version: str, kind: str) -> ResourceKind:
        """Split an apiVersion of the form "group/version" or "version"."""
        group, _, version = api_version.rpartition("/")
        return cls(group=group, version=version, kind=kind)


@dataclass(frozen=True)
class Snapshot:
    """Serialized state of one tracked object."""

    name: str
    content: bytes


def resource_filename(gvk: ResourceKind) -> str:
    """Snapshot file name for a type descriptor."""
    return f"{gvk.kind}.{gvk.version}.{gvk.group}.yaml".lower()


def instance_filename(gvk: ResourceKind, namespace: str, name: str) -> str:
    """Snapshot file name keyed on type and instance identity."""
    return f"{gvk.kind}.{gvk.version}.{gvk.group}.{namespace}.{name}.yaml".lower()


def _as_mapping(obj: Any) -> Mapping[str, Any]:
    if isinstance(obj, Mapping):
        return obj
    to_dict = getattr(obj, "to_dict", None)
    if callable(to_dict):
        try:
            data = to_dict()
        except Exception as e:
            raise DecodeError(reason=f"to_dict() failed: {e}") from e
        if isinstance(data, Mapping):
            return data
    raise DecodeError(reason=f"unsupported object type {type(obj).__name__}")


def _check_segment(value: str, field: str, name: str = "") -> None:
    # Every segment lands in a single file name at the working tree root.
    if "/" in value or "\\" in value:
        raise DecodeError(name, f"object '{field}' contains a path separator")
    if not value.isprintable():
        raise DecodeError(name, f"object '{field}' contains control characters")


def _type_of(data: Mapping[str, Any]) -> ResourceKind:
    api_version = data.get("apiVersion")
    kind = data.get("kind")
    if not isinstance(kind, str) or not kind:
        raise DecodeError(reason="object 'kind' is missing")
    if not isinstance(api_version, str) or not api_version:
        raise DecodeError(reason="object 'apiVersion' is missing")
    gvk = ResourceKind.from_api_version(api_version, kind)
    _check_segment(gvk.kind, "kind")
    _check_segment(gvk.group, "apiVersion")
    _check_segment(gvk.version, "apiVersion")
    return gvk


def snapshot_name(
    data: Mapping[str, Any],
    scheme: PathScheme = PathScheme.TYPE,
) -> str:
    """Derive the snapshot file name of decoded object content."""
    gvk = _type_of(data)
    if scheme is PathScheme.TYPE:
        return resource_filename(gvk)

    metadata = data.get("metadata") or {}
    if not isinstance(metadata, Mapping):
        raise DecodeError(resource_filename(gvk), "object 'metadata' is not a mapping")
    name = metadata.get("name")
    if not isinstance(name, str) or not name:
        raise DecodeError(resource_filename(gvk), "object 'metadata.name' is missing")
    namespace = str(metadata.get("namespace") or "")
    _check_segment(name, "metadata.name", resource_filename(gvk))
    _check_segment(namespace, "metadata.namespace", resource_filename(gvk))
    return instance_filename(gvk, namespace, name)


def to_yaml(data: Mapping[str, Any]) -> bytes:
    """Render object content as canonical YAML.

    The content goes through JSON first so only JSON representable values
    reach the YAML dumper, and keys come out sorted.
    """
    normalized = json.loads(json.dumps(data))
    return yaml.safe_dump(
        normalized,
        default_flow_style=False,
        sort_keys=True,
        allow_unicode=True,
    ).encode("utf-8")


def decode_object(
    obj: Any,
    scheme: PathScheme = PathScheme.TYPE,
) -> Tuple[str, bytes]:
    """Decode a tracked object into its snapshot file name and content.

    Raises:
        DecodeError: If the object has no usable type descriptor or its
            payload cannot be rendered
    """
    data = _as_mapping(obj)
    name = snapshot_name(data, scheme)
    try:
        content = to_yaml(data)
    except (TypeError, ValueError, RecursionError, yaml.YAMLError) as e:
        raise DecodeError(name, str(e)) from e
    return name, content


def decode_snapshot(obj: Any, scheme: PathScheme = PathScheme.TYPE) -> Snapshot:
    """Decode a tracked object into a Snapshot."""
    name, content = decode_object(obj, scheme)
    return Snapshot(name=name, content=content)
