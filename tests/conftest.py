"""
Pytest configuration and fixtures for CodePlay tests.
"""

import os

# must be set before codeplay.main builds its settings
os.environ.setdefault("PROVISION_ON_STARTUP", "false")
os.environ.setdefault("RATE_LIMIT_BACKEND", "memory")

import httpx
import pytest
from hypothesis import Verbosity, settings

settings.register_profile("default", max_examples=100, deadline=None)
settings.register_profile("ci", max_examples=200, deadline=None)
settings.register_profile(
    "dev", max_examples=10, verbosity=Verbosity.verbose, deadline=None
)
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "default"))


PISTON_OK = {
    "language": "python",
    "version": "3.10.0",
    "run": {
        "stdout": "hi\n",
        "stderr": "",
        "output": "hi\n",
        "code": 0,
        "signal": None,
    },
}


class Recorder:
    """Collects requests sent through an httpx.MockTransport."""

    def __init__(self, handler):
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    def to(self, host: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == host]


@pytest.fixture
def piston_ok():
    return dict(PISTON_OK)


@pytest.fixture
def recorder():
    def make(handler):
        return Recorder(handler)

    return make


@pytest.fixture
def sample_python_with_inputs():
    return '''name = input("Enter name:")
age = input('Enter age:')
extra = input()
print(name, age, extra)
'''
