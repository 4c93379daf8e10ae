"""Wallet identifier validation."""

from __future__ import annotations

import re

from errors import ResolutionError

WALLET_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def resolve_wallet(identifier: str) -> str:
    """Return the lower-cased wallet address for ``identifier``.

    Only raw addresses are accepted; looking up usernames needs the venue's
    profile pages and is left to the caller.
    """
    value = (identifier or "").strip()
    if value.startswith("@"):
        value = value[1:]
    if not value:
        raise ResolutionError("Enter a wallet address (0x followed by 40 hex characters)")
    if not WALLET_RE.match(value):
        raise ResolutionError(
            f'Could not resolve "{value}" to a wallet address. '
            "Enter the proxy wallet address from your profile page (starts with 0x)."
        )
    return value.lower()
