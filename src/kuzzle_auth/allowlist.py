"""Allowed users check."""

from __future__ import annotations

from collections.abc import Collection


def is_allowed(identity_id: str, allowed: Collection[str]) -> bool:
    """Check if a KUID may go through the gate.

    An empty allow-list lets every authenticated user through. Otherwise the
    KUID must be exactly one of the allowed ids.
    """
    if not allowed:
        return True
    return identity_id in allowed
