"""Pytest configuration and shared fixtures."""
import pytest

from spacestate import Space


class CauseRecorder:
    """Subscriber that records every cause it receives."""

    def __init__(self):
        self.causes = []

    def __call__(self, cause):
        self.causes.append(cause)

    @property
    def changes(self):
        """Causes received after the initial 'initialized' call."""
        return [c for c in self.causes if c != "initialized"]


@pytest.fixture
def recorder():
    """Provide a fresh cause recorder."""
    return CauseRecorder()


@pytest.fixture
def make_recorder():
    """Factory for several independent recorders in one test."""
    return CauseRecorder


@pytest.fixture
def app_state():
    """Provide a small todo application state."""
    return {
        "title": "Groceries",
        "filter": {"show_done": True},
        "todos": [
            {"id": "1", "text": "milk", "done": False},
            {"id": "2", "text": "eggs", "done": False},
        ],
    }


@pytest.fixture
def app(app_state):
    """Provide a root space over the todo application state."""
    return Space(app_state)
