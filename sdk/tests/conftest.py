# SPDX-License-Identifier: Apache-2.0
import json

import pytest

from ukcas_client import UkcasClient


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self.text = json.dumps(body) if body is not None else ""

    def json(self):
        return json.loads(self.text)


class FakeSession:
    """Queued responses in, recorded requests out."""

    def __init__(self):
        self.responses = []
        self.calls = []

    def queue(self, status_code=200, body=None):
        self.responses.append(FakeResponse(status_code, body))

    def request(self, method, url, headers=None, params=None, json=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "params": params, "json": json})
        return self.responses.pop(0)


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def client(session):
    return UkcasClient("http://localhost:8000/", token="tok", institute_id="inst-1", session=session)
