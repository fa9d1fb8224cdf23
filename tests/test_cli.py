import io

import pytest

from sealpad.cli import main
from sealpad.clients.sealpad_client import SealpadClient


@pytest.fixture
def sealpad(client):
    return SealpadClient(server_url="http://testserver", session=client)


def _link(capsys, sealpad, *argv):
    assert main(["send", *argv], client=sealpad) == 0
    return capsys.readouterr().out.strip()


def test_send_then_reveal(capsys, sealpad):
    link = _link(capsys, sealpad, "launch codes", "--burn")
    assert "/send/" in link and "#" in link

    assert main(["reveal", link], client=sealpad) == 0
    assert capsys.readouterr().out.strip() == "launch codes"

    assert main(["reveal", link], client=sealpad) == 1
    assert "burned" in capsys.readouterr().err


def test_peek_shows_metadata(capsys, sealpad):
    link = _link(capsys, sealpad, "peek me", "--expires", "1h", "--burn")

    assert main(["reveal", link, "--peek"], client=sealpad) == 0
    out = capsys.readouterr().out
    assert "Burn after reading: yes" in out
    assert "Expires: never" not in out

    # Peeking did not consume it
    assert main(["reveal", link], client=sealpad) == 0


def test_send_reads_stdin(capsys, monkeypatch, sealpad):
    monkeypatch.setattr("sys.stdin", io.StringIO("from a pipe\n"))
    link = _link(capsys, sealpad)

    main(["reveal", link], client=sealpad)
    assert capsys.readouterr().out.strip() == "from a pipe"


def test_bad_duration_is_usage_error(capsys, sealpad):
    assert main(["send", "x", "--expires", "soon"], client=sealpad) == 2
    assert "Invalid duration" in capsys.readouterr().err


def test_write_and_read(capsys, sealpad):
    assert main(["write", "groceries", "eggs, milk"], client=sealpad) == 0
    assert main(["read", "groceries"], client=sealpad) == 0
    assert capsys.readouterr().out.strip() == "eggs, milk"


def test_invalid_link(capsys, sealpad):
    assert main(["reveal", "http://testserver/send/abc"], client=sealpad) == 1
    assert "Invalid secret link" in capsys.readouterr().err
