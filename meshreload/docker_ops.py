from __future__ import annotations

import logging
import os
import stat
from typing import Any

import docker
from docker.errors import DockerException, NotFound
from docker.models.containers import Container

from .errors import InsufficientSiblings, MissingLabel, RuntimeUnavailable, SelfNotFound, TargetNotFound
from .events import log_event
from .labels import ECS_CONTAINER_NAME_KEY, ECS_TASK_ARN_KEY, ContainerDescriptor, from_inspect, from_summary
from .settings import settings

logger = logging.getLogger(__name__)


def is_socket(path: str) -> bool:
    try:
        return stat.S_ISSOCK(os.stat(path).st_mode)
    except OSError:
        return False


def docker_client(socket_path: str | None = None) -> docker.DockerClient:
    """Client bound to a local Docker socket.

    The path must exist and be a unix socket.
    """
    socket_path = socket_path or settings.docker_socket
    if not is_socket(socket_path):
        raise RuntimeUnavailable(f"Docker socket {socket_path} was not found or is not a socket")
    try:
        return docker.DockerClient(base_url=f"unix://{socket_path}")
    except DockerException as e:
        raise RuntimeUnavailable(f"Could not connect to Docker at {socket_path}: {e}") from e


def resolve_task_id(client: Any, this_container_id: str) -> str:
    """Task ARN of the container this process runs in."""
    try:
        this_container = client.containers.get(this_container_id)
    except NotFound:
        this_container = None
    if this_container is None:
        raise SelfNotFound(
            f"Could not find THIS container [{this_container_id}]. "
            "Are you running this script in Docker? It also can't be run in host-networking mode."
        )

    task_arn = from_inspect(this_container.attrs).label(ECS_TASK_ARN_KEY)
    if not isinstance(task_arn, str) or not task_arn:
        raise MissingLabel(
            f'Could not locate the Task ARN for this deployment. Ensure the label "{ECS_TASK_ARN_KEY}" is present.'
        )
    return task_arn


def list_siblings(client: Any, task_arn: str) -> list[ContainerDescriptor]:
    """All containers of the task, this one included."""
    containers = client.containers.list(filters={"label": f"{ECS_TASK_ARN_KEY}={task_arn}"}, sparse=True)
    if not isinstance(containers, list) or len(containers) < 2:
        raise InsufficientSiblings(f"Expecting 2 or more task containers for TaskArn: {task_arn}")
    return [from_summary(c.attrs) for c in containers]


def select_target(client: Any, siblings: list[ContainerDescriptor], target_name: str) -> Container:
    """Handle for the first sibling whose ECS container name matches.

    Order is whatever the runtime listed; duplicate names resolve to the first.
    """
    for desc in siblings:
        if desc.label(ECS_CONTAINER_NAME_KEY) == target_name:
            log_event("INFO", f'Found target container "{target_name}" [{desc.short_id}]', log=logger)
            return client.containers.get(desc.id)
    raise TargetNotFound(f'Could not find target container with name "{target_name}".')


def resolve_target(client: Any, this_container_id: str, target_name: str) -> Container:
    task_arn = resolve_task_id(client, this_container_id)
    siblings = list_siblings(client, task_arn)
    return select_target(client, siblings, target_name)
