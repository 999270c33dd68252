import os as _os
import sys
from dataclasses import replace

import pytest
from docker.errors import NotFound

# Ensure project root is importable (so `import cli` works reliably across environments)
_project_root = _os.path.dirname(_os.path.dirname(__file__))
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

from meshreload import events  # noqa: E402
from meshreload.labels import ECS_CONTAINER_NAME_KEY, ECS_TASK_ARN_KEY  # noqa: E402

TASK_ARN = "arn:aws:ecs:us-east-1:123456789012:task/00084709-991b-44ae-b5a6-a5cb47f914da"


class FakeContainer:
    """Just enough of docker.models.containers.Container for the reloader."""

    def __init__(self, id, attrs=None, name=None, fail_kill=False):
        self.id = id
        self.name = name
        self.attrs = attrs if attrs is not None else {"Id": id}
        self.fail_kill = fail_kill
        self.kills = []

    def kill(self, signal=None):
        self.kills.append(signal)
        if self.fail_kill:
            raise RuntimeError("kill failed")


class FakeContainers:
    def __init__(self, by_id=None, listed=None):
        self.by_id = dict(by_id or {})
        self.listed = listed if listed is not None else []
        self.get_calls = []
        self.list_calls = []

    def get(self, container_id):
        self.get_calls.append(container_id)
        if container_id not in self.by_id:
            raise NotFound(f"No such container: {container_id}")
        return self.by_id[container_id]

    def list(self, **kwargs):
        self.list_calls.append(kwargs)
        if isinstance(self.listed, Exception):
            raise self.listed
        return self.listed


class FakeClient:
    def __init__(self, containers):
        self.containers = containers


def inspect_attrs(container_id, labels):
    return {"Id": container_id, "Config": {"Labels": labels}}


def summary_attrs(container_id, labels):
    return {"Id": container_id, "Labels": labels}


def task_client(names, self_id="self0000000000", task_arn=TASK_ARN):
    """A client whose task holds this container plus one sibling per name."""
    me = FakeContainer(self_id, inspect_attrs(self_id, {ECS_TASK_ARN_KEY: task_arn}))
    listed = [FakeContainer(self_id, summary_attrs(self_id, {ECS_TASK_ARN_KEY: task_arn, ECS_CONTAINER_NAME_KEY: "reloader"}))]
    by_id = {self_id: me}
    for i, name in enumerate(names):
        cid = f"{name}-{i:02d}" + "0" * 40
        labels = {ECS_TASK_ARN_KEY: task_arn, ECS_CONTAINER_NAME_KEY: name}
        listed.append(FakeContainer(cid, summary_attrs(cid, labels)))
        by_id[cid] = FakeContainer(cid, inspect_attrs(cid, labels), name=name)
    return FakeClient(FakeContainers(by_id=by_id, listed=listed))


@pytest.fixture
def journal(tmp_path, monkeypatch):
    """Enable the sqlite event journal in a temp dir."""
    monkeypatch.setattr(events, "settings", replace(events.settings, events_db=str(tmp_path / "events.db")))
    events.init_db()
    return events
