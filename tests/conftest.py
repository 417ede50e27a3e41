# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from smithy.adapters.diagnostics import NullDiagnosticsSink
from smithy.api.http import app  # ensures imports resolve; run tests from repo root


@pytest.fixture(scope="session")
def client():
    return TestClient(app)


class RecordingSink:
    def __init__(self):
        self.snapshots = []

    def record(self, snapshot):
        self.snapshots.append(snapshot)


@pytest.fixture
def null_sink():
    return NullDiagnosticsSink()


@pytest.fixture
def recording_sink():
    return RecordingSink()
