"""Pytest configuration and fixtures."""

import json

import httpx
import pytest

from legal_secretary.app import create_app
from legal_secretary.models import CloudConfig
from legal_secretary.services.library import TemplateLibrary
from legal_secretary.services.storage import LocalStorage, TemplateStore


class ManualCall:
    """Handle returned by ManualScheduler.call_later."""

    def __init__(self, delay, fn, name):
        self.delay = delay
        self.fn = fn
        self.name = name
        self.cancelled = False
        self.fired = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler:
    """Scheduler that only runs work when the test says so."""

    def __init__(self):
        self.calls = []
        self.tasks = []

    def call_later(self, delay, fn, name=None):
        call = ManualCall(delay, fn, name)
        self.calls.append(call)
        return call

    def submit(self, fn, name=None):
        self.tasks.append((name, fn))

    @property
    def live_calls(self):
        return [c for c in self.calls if not c.cancelled and not c.fired]

    def fire_pending(self):
        """Run every delayed call that has not been cancelled."""
        for call in self.live_calls:
            call.fired = True
            call.fn()

    def run_tasks(self):
        tasks, self.tasks = self.tasks, []
        for _, fn in tasks:
            fn()


class FakeRemote:
    """In-memory JSON-blob store reachable through httpx.MockTransport."""

    def __init__(self):
        self.requests = []
        self.document = None
        self.status_code = 200
        self.wrap_in_record = True

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.status_code >= 400:
            return httpx.Response(self.status_code, json={"message": "error"})
        if request.method == "PUT":
            self.document = json.loads(request.content)
            return httpx.Response(200, json={"record": self.document})
        body = {"record": self.document} if self.wrap_in_record else self.document
        return httpx.Response(200, json=body)

    @property
    def methods(self):
        return [r.method for r in self.requests]

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handler))


ENDPOINT = "https://api.jsonbin.io/v3/b/test-bin"


@pytest.fixture
def storage(tmp_path) -> LocalStorage:
    return LocalStorage(tmp_path / "data")


@pytest.fixture
def store(storage) -> TemplateStore:
    return TemplateStore(storage)


@pytest.fixture
def scheduler() -> ManualScheduler:
    return ManualScheduler()


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote()


@pytest.fixture
def library(store, scheduler, remote) -> TemplateLibrary:
    """Library with no cloud endpoint configured."""
    return TemplateLibrary(store, scheduler=scheduler, http_client=remote.client())


@pytest.fixture
def cloud_config() -> CloudConfig:
    return CloudConfig(endpoint=ENDPOINT, api_key="secret-key-1234")


@pytest.fixture
def sample_template() -> dict:
    return {
        "id": "tpl-contract",
        "name": "Hợp đồng lao động",
        "category": "Hợp đồng",
        "description": "Mẫu hợp đồng lao động",
        "structure": "HỢP ĐỒNG LAO ĐỘNG\nBên A: {{BÊN_A}}\nBên B: {{BÊN_B}}",
        "placeholders": ["BÊN_A", "BÊN_B"],
        "createdAt": 1700000000000,
    }


@pytest.fixture
def app(library):
    app = create_app(library)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()
