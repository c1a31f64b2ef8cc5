"""
Session gate.

Decides whether a usable credential is present. Every network-facing
operation of the sync engine checks the gate first and silently does
nothing when it is closed.
"""

from typing import Callable, Optional

# Values that upstream serialization bugs write in place of a real token.
INVALID_TOKEN_LITERALS = frozenset(["undefined", "null"])


def is_valid_token(token: Optional[str]) -> bool:
    """
    Check the shape of a token.

    A token is valid when it is a non-empty string other than the literals
    "undefined" and "null". The token is never parsed or verified.
    """
    if not token or not isinstance(token, str):
        return False
    return token not in INVALID_TOKEN_LITERALS


class SessionGate:
    """
    Gate over a token source.

    The token provider is called on every check so that a logout is noticed
    at the next tick rather than at the next restart.

    Args:
        token_provider: Callable returning the current raw token or None
    """

    def __init__(self, token_provider: Callable[[], Optional[str]]):
        self._token_provider = token_provider

    def has_valid_credential(self) -> bool:
        """Return True if the current token has a valid shape."""
        return is_valid_token(self._token_provider())

    def token(self) -> Optional[str]:
        """Return the current token if valid, else None."""
        token = self._token_provider()
        return token if is_valid_token(token) else None
