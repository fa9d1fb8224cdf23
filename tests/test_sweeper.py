import anyio
import pytest

from sealpad.core.note import now_ms
from sealpad.core.sweeper import ExpirySweeper
from sealpad.infra.note_store import NoteStore


def _seed(notes):
    now = now_ms()
    notes.create_or_update("expired-1", "x", expires_at=now - 10_000)
    notes.create_or_update("expired-2", "x", expires_at=now - 1)
    notes.create_or_update("future", "x", expires_at=now + 60_000)
    notes.create_or_update("forever", "x")


def test_sweep_once_deletes_only_expired(notes, store):
    _seed(notes)

    assert ExpirySweeper(store).sweep_once() == 2

    assert store.get("expired-1") is None
    assert store.get("expired-2") is None
    assert store.get("future") is not None
    assert store.get("forever") is not None


def test_sweep_once_with_nothing_to_do(store):
    assert ExpirySweeper(store).sweep_once() == 0


def test_sweep_uses_strict_less_than(notes, store):
    notes.create_or_update("edge", "x", expires_at=5_000)
    sweeper = ExpirySweeper(store)

    assert sweeper.sweep_once(now=5_000) == 0
    assert sweeper.sweep_once(now=5_001) == 1


def test_sweep_survives_store_errors(broken_store, caplog):
    assert ExpirySweeper(broken_store).sweep_once() == 0
    assert "Cleanup error" in caplog.text


class CountingStore(NoteStore):
    def __init__(self):
        self.calls = 0

    def delete_expired(self, now):
        self.calls += 1
        return 0


@pytest.mark.anyio
async def test_background_loop_sweeps_until_stopped():
    store = CountingStore()
    sweeper = ExpirySweeper(store, interval=0.01)

    sweeper.start()
    assert sweeper.running
    with anyio.fail_after(5):
        while store.calls < 2:
            await anyio.sleep(0.01)
    await sweeper.stop()

    assert not sweeper.running
    calls = store.calls
    await anyio.sleep(0.05)
    assert store.calls == calls


@pytest.mark.anyio
async def test_stop_without_start_is_harmless():
    await ExpirySweeper(CountingStore()).stop()
