import pytest
from fastapi.testclient import TestClient

from sealpad.core.note import NoteService
from sealpad.core.rate_limit import limiter
from sealpad.core.rooms import RoomClient
from sealpad.infra.database import make_engine
from sealpad.infra.note_store import NoteStore, SqlNoteStore
from sealpad.main import create_app


class FakeRoomClient(RoomClient):
    def __init__(self, name=""):
        self.name = name
        self.messages = []
        self.closed = False

    async def send(self, message):
        self.messages.append(message.model_dump())

    async def close(self):
        self.closed = True

    def of_type(self, kind):
        return [m for m in self.messages if m["type"] == kind]


class BrokenStore(NoteStore):
    def _fail(self, *args, **kwargs):
        raise RuntimeError("connection refused: db.internal:5432")

    get = get_metadata = upsert = delete = delete_expired = _fail


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def store():
    s = SqlNoteStore(make_engine("sqlite://"))
    s.create_tables()
    yield s
    s.engine.dispose()


@pytest.fixture
def notes(store):
    return NoteService(store)


@pytest.fixture
def app(store):
    limiter.reset()
    return create_app(store=store, sweep_interval=3600)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def broken_store():
    return BrokenStore()


@pytest.fixture
def room_client():
    return FakeRoomClient
