"""
Shared fixtures: canned HTTP responses for the requests sessions under test.
"""

import threading

import pytest
import requests


class FakeResponse:
    def __init__(self, content=b'', status_code=200, headers=None, text=None, json_data=None):
        self.content = content
        self.status_code = status_code
        self.headers = headers or {}
        self._text = text
        self._json = json_data

    @property
    def text(self):
        if self._text is not None:
            return self._text
        return self.content.decode('utf-8')

    def json(self):
        return self._json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error", response=self)


class Router:
    """Callable standing in for Session.get; answers by URL and records calls."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self._lock = threading.Lock()

    def __call__(self, url, params=None, timeout=None, **kwargs):
        with self._lock:
            self.calls.append((url, params))
        answer = self.routes.get(url)
        if answer is None:
            raise requests.ConnectionError(f"no route to {url}")
        if isinstance(answer, Exception):
            raise answer
        return answer

    def count(self, url):
        return sum(1 for called, _ in self.calls if called == url)


@pytest.fixture
def make_response():
    return FakeResponse


@pytest.fixture
def make_router():
    return Router
