"""
sealpad command line.

Usage:
  sealpad send [CONTENT] [--expires 1h] [--burn]
  sealpad reveal LINK [--peek]
  sealpad write TITLE [CONTENT]
  sealpad read TITLE

Content falls back to stdin when omitted. Everything is encrypted locally;
the server only sees ciphertext.

Exit codes: 0=OK, 1=not found/expired/error, 2=usage.
"""

import argparse
import sys
from datetime import datetime, timezone
from typing import List, Optional

import requests

from sealpad.clients.sealpad_client import (
    DEFAULT_EXPIRY,
    NoteExpired,
    NoteNotFound,
    SealpadClient,
    SealpadError,
    parse_duration,
)
from sealpad.config import SERVER_URL


def _build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="sealpad", description="Zero-knowledge notes and one-time secrets")
    ap.add_argument("--server", default=SERVER_URL, help=f"Server base URL (default: {SERVER_URL})")

    sub = ap.add_subparsers(dest="cmd", required=True)

    p_send = sub.add_parser("send", help="Create a secret link")
    p_send.add_argument("content", nargs="?", default=None)
    p_send.add_argument("--expires", default=DEFAULT_EXPIRY, help='Expiration, e.g. "30m", "1h", "7d"')
    p_send.add_argument("--burn", action="store_true", help="Burn after first read")

    p_reveal = sub.add_parser("reveal", help="Open a secret link")
    p_reveal.add_argument("link")
    p_reveal.add_argument("--peek", action="store_true", help="Show metadata without burning")

    p_write = sub.add_parser("write", help="Write a shared note")
    p_write.add_argument("title")
    p_write.add_argument("content", nargs="?", default=None)

    p_read = sub.add_parser("read", help="Read a shared note")
    p_read.add_argument("title")

    return ap


def _content_or_stdin(content: Optional[str]) -> str:
    if content:
        return content
    if sys.stdin is None or sys.stdin.isatty():
        return ""
    return sys.stdin.read().rstrip("\n")


def _format_expiry(expires_at: Optional[int]) -> str:
    if not expires_at:
        return "never"
    return datetime.fromtimestamp(expires_at / 1000, tz=timezone.utc).isoformat(timespec="seconds")


def main(argv: Optional[List[str]] = None, client: Optional[SealpadClient] = None) -> int:
    args = _build_parser().parse_args(argv)
    client = client or SealpadClient(args.server)

    try:
        if args.cmd == "send":
            parse_duration(args.expires)
            link = client.send_secret(_content_or_stdin(args.content), args.expires, args.burn)
            print(link)
            print(f"Expires in: {args.expires}", file=sys.stderr)
            print(f"Burn after reading: {'yes' if args.burn else 'no'}", file=sys.stderr)
            return 0

        if args.cmd == "reveal":
            if args.peek:
                info = client.peek_secret(args.link)
                print(f"Expires: {_format_expiry(info.expires_at)}")
                print(f"Burn after reading: {'yes' if info.burn_after_reading else 'no'}")
                return 0
            content = client.reveal_secret(args.link)
            if not content:
                print("Could not decrypt (wrong link?)", file=sys.stderr)
                return 1
            print(content)
            return 0

        if args.cmd == "write":
            client.write_note(args.title, _content_or_stdin(args.content))
            print("Saved", file=sys.stderr)
            return 0

        if args.cmd == "read":
            print(client.read_note(args.title))
            return 0

    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except NoteExpired:
        print("Secret has expired", file=sys.stderr)
        return 1
    except NoteNotFound:
        print("Not found (may have been burned)", file=sys.stderr)
        return 1
    except SealpadError as e:
        print(str(e), file=sys.stderr)
        return 1
    except requests.RequestException as e:
        print(f"Cannot reach {args.server}: {e}", file=sys.stderr)
        return 1

    print("Unknown command.", file=sys.stderr)
    return 2


if __name__ == "__main__":
    raise SystemExit(main())
