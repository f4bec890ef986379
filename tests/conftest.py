"""Shared pytest fixtures for akoolgen tests."""

import json
import shutil
import tempfile
from collections import defaultdict, deque
from pathlib import Path
from typing import Generator

import httpx
import pytest

from akoolgen.core.config import AkoolgenConfig
from akoolgen.core.schemas import JobStatusSnapshot
from akoolgen.tracking import JobTracker


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for test files.

    Yields:
        Path to temporary directory

    Cleanup:
        Directory is removed after test completes
    """
    temp_path = Path(tempfile.mkdtemp())
    try:
        yield temp_path
    finally:
        shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config(temp_dir: Path) -> AkoolgenConfig:
    """Create a test configuration pointing at a fake provider.

    Args:
        temp_dir: Temporary directory from fixture

    Returns:
        AkoolgenConfig instance for testing
    """
    return AkoolgenConfig(
        provider_base_url="https://akool.test/api/open/v3",
        api_base_url="http://testserver/api",
        downloads_dir=str(temp_dir / "downloads"),
        poll_interval=0.01,
        request_timeout=5.0,
        _env_file=None,
    )


def snap(**data) -> JobStatusSnapshot:
    """Build a status snapshot from provider-style fields."""
    return JobStatusSnapshot.from_payload(data)


class ManualPollScheduler:
    """Polling scheduler driven by hand instead of by a clock.

    ``tick()`` runs one poll for every active cycle, the way one period of
    the real scheduler would.
    """

    def __init__(self):
        self.callbacks = {}
        self.started = []

    def start(self, job_id, callback):
        self.callbacks[job_id] = callback
        self.started.append(job_id)

    def cancel(self, job_id):
        self.callbacks.pop(job_id, None)

    def cancel_all(self):
        self.callbacks.clear()

    def is_active(self, job_id):
        return job_id in self.callbacks

    def active_ids(self):
        return list(self.callbacks)

    async def tick(self):
        for callback in list(self.callbacks.values()):
            await callback()


class ScriptedStatusSource:
    """Status source replaying queued snapshots (or exceptions) per job id.

    Once a job's queue is empty the last item is repeated.
    """

    def __init__(self):
        self.queues = defaultdict(deque)
        self.last = {}
        self.calls = []

    def push(self, job_id, *items):
        self.queues[job_id].extend(items)

    async def get_status(self, job_id):
        self.calls.append(job_id)
        queue = self.queues[job_id]
        item = queue.popleft() if queue else self.last.get(job_id, snap(image_status=1))
        self.last[job_id] = item
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def scheduler() -> ManualPollScheduler:
    return ManualPollScheduler()


@pytest.fixture
def status_source() -> ScriptedStatusSource:
    return ScriptedStatusSource()


@pytest.fixture
def tracker(status_source, scheduler, test_config) -> JobTracker:
    return JobTracker(status_source, scheduler, cfg=test_config)


class FakeAkool:
    """In-memory stand-in for the Akool open API, served via httpx.MockTransport.

    Attributes:
        requests: Every request received, in order.
        statuses: Status payloads returned per job id.
        token_response: Body returned by ``/getToken``.
        next_error: If set, returned (once) instead of the next create/status body.
        next_error_status: HTTP status sent with ``next_error``.
    """

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.statuses: dict[str, dict] = {}
        self.token_response = {"code": 1000, "token": "bearer-token-123"}
        self.next_error: dict | None = None
        self.next_error_status = 200
        self.fail_transport = False
        self._counter = 0

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def _new_id(self) -> str:
        self._counter += 1
        return f"job-{self._counter}"

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_transport:
            raise httpx.ConnectError("connection refused", request=request)

        path = request.url.path
        if path.endswith("/getToken"):
            return httpx.Response(200, json=self.token_response)

        if self.next_error is not None:
            body, self.next_error = self.next_error, None
            return httpx.Response(self.next_error_status, json=body)

        if path.endswith("/content/image/createbyprompt"):
            payload = json.loads(request.content)
            job_id = self._new_id()
            data = {
                "_id": job_id,
                "image_status": 1,
                "prompt": payload["prompt"],
                "source_image": payload.get("source_image", ""),
            }
            self.statuses.setdefault(job_id, {"image_status": 1})
            return httpx.Response(200, json={"code": 1000, "msg": "OK", "data": data})

        if path.endswith("/content/image/createbybutton"):
            job_id = self._new_id()
            self.statuses.setdefault(job_id, {"image_status": 1})
            return httpx.Response(
                200, json={"code": 1000, "msg": "OK", "data": {"_id": job_id, "image_status": 1}}
            )

        if path.endswith("/content/image/infobymodelid"):
            job_id = request.url.params["image_model_id"]
            data = self.statuses.get(job_id)
            if data is None:
                return httpx.Response(200, json={"code": 1003, "msg": "Not found"})
            return httpx.Response(200, json={"code": 1000, "msg": "OK", "data": data})

        return httpx.Response(404, json={"code": 404, "msg": "unknown path"})


@pytest.fixture
def fake_akool() -> FakeAkool:
    return FakeAkool()


@pytest.fixture
def test_app(test_config, fake_akool):
    """FastAPI app wired to the fake provider, without the Gradio UI."""
    from akoolgen.api.main import create_app

    return create_app(test_config, transport=fake_akool.transport, mount_ui=False)


@pytest.fixture
def test_client(test_app):
    """FastAPI TestClient with the lifespan running."""
    from fastapi.testclient import TestClient

    with TestClient(test_app) as client:
        yield client
