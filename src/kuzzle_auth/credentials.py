"""Basic-auth credentials extraction."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field


@dataclass(frozen=True)
class Credentials:
    """User name and password sent by the client for one request."""

    username: str
    password: str = field(repr=False)


def parse_basic_auth(header: str | None) -> Credentials | None:
    """Parse an ``Authorization: Basic <base64(user:pass)>`` header value.

    The scheme is matched case-insensitively. The payload must be valid
    base64 containing a ``:``; everything after the first ``:`` is the
    password. It is read as UTF-8, falling back to latin-1 for clients that
    send legacy single-byte credentials.

    Returns:
        Credentials, or None if the header is absent or malformed

    Example:
        creds = parse_basic_auth("Basic YWRtaW46eA==")
        # Credentials(username='admin')
    """
    if not header:
        return None

    scheme, _, payload = header.partition(" ")
    if scheme.lower() != "basic" or not payload:
        return None

    try:
        raw = base64.b64decode(payload.strip(), validate=True)
    except binascii.Error:
        return None

    try:
        decoded = raw.decode("utf-8")
    except UnicodeDecodeError:
        decoded = raw.decode("latin-1")

    username, sep, password = decoded.partition(":")
    if not sep:
        return None

    return Credentials(username=username, password=password)

