import logging
import os
import sys
import tempfile
from datetime import datetime, timedelta, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# keep logs / recovery copies out of the real home directory
os.environ.setdefault("NOTES_CLIENT_HOME", tempfile.mkdtemp(prefix="notes-client-test-"))

import pytest

from notes_client.services import EditorSession, NoteStore, SelectionController
from notes_client.storage import JsonNotesGateway, MemoryBackend


class FakeClock:
    """Starts at a fixed instant; each call advances by `step`."""

    def __init__(self, start=None, step=timedelta(seconds=1)):
        self.now = start or datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self):
        current = self.now
        self.now = self.now + self.step
        return current


class CountingIds:
    def __init__(self, prefix="n"):
        self.prefix = prefix
        self.count = 0

    def __call__(self):
        self.count += 1
        return f"{self.prefix}{self.count}"


@pytest.fixture(autouse=True)
def reset_logging():
    """main() installs handlers and an excepthook; undo them between tests."""
    saved_hook = sys.excepthook
    yield
    sys.excepthook = saved_hook
    logger = logging.getLogger("notes_client")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def backend():
    return MemoryBackend()


@pytest.fixture
def gateway(backend):
    return JsonNotesGateway(backend)


@pytest.fixture
def store(gateway, clock, tmp_path):
    return NoteStore(gateway, clock=clock, id_factory=CountingIds(), recovery_dir=tmp_path / "recovery")


@pytest.fixture
def selection(store):
    return SelectionController(store)


@pytest.fixture
def session(store, selection):
    return EditorSession(store, selection)
