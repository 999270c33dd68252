from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


ECS_TASK_ARN_KEY = "com.amazonaws.ecs.task-arn"
ECS_CONTAINER_NAME_KEY = "com.amazonaws.ecs.container-name"


@dataclass(frozen=True)
class ContainerDescriptor:
    id: str
    labels: Mapping[str, Any] = field(default_factory=dict)

    def label(self, key: str) -> Any:
        return self.labels.get(key)

    @property
    def short_id(self) -> str:
        return self.id[:12]


def _mapping(value: Any) -> Mapping[str, Any]:
    return value if isinstance(value, Mapping) else {}


def _config_labels(attrs: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(_mapping(attrs.get("Config")).get("Labels"))


def _summary_labels(attrs: Mapping[str, Any]) -> Mapping[str, Any]:
    return _mapping(attrs.get("Labels"))


def from_inspect(attrs: Mapping[str, Any]) -> ContainerDescriptor:
    """Descriptor from `docker inspect` output (labels under Config.Labels)."""
    return ContainerDescriptor(id=str(attrs.get("Id") or ""), labels=dict(_config_labels(attrs)))


def from_summary(attrs: Mapping[str, Any]) -> ContainerDescriptor:
    """Descriptor from a `docker ps` entry (labels at the top level)."""
    return ContainerDescriptor(id=str(attrs.get("Id") or ""), labels=dict(_summary_labels(attrs)))


def describe(attrs: Mapping[str, Any]) -> ContainerDescriptor:
    """Descriptor for either shape. Config.Labels wins over Labels per key."""
    labels = dict(_summary_labels(attrs))
    labels.update(_config_labels(attrs))
    return ContainerDescriptor(id=str(attrs.get("Id") or ""), labels=labels)


def get_label(container: ContainerDescriptor | Mapping[str, Any], key: str) -> Any:
    """Return a label value, or None when the container does not carry it."""
    if isinstance(container, ContainerDescriptor):
        return container.label(key)
    return describe(container).label(key)
