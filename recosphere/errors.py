"""Domain errors raised by the favorites workflow.

Routers translate these into HTTP responses; they subclass the builtin
``ValueError``/``LookupError`` so callers that only care about the broad
category can keep catching those.
"""

from __future__ import annotations


class DuplicateError(ValueError):
    """The user already has a favorite for this external id."""

    def __init__(self, user_id: str, external_id: str) -> None:
        super().__init__("Favorite already exists")
        self.user_id = user_id
        self.external_id = external_id


class NotFoundError(LookupError):
    """No favorite with the given id is owned by the caller."""

    def __init__(self, favorite_id: int) -> None:
        super().__init__("Favorite not found")
        self.favorite_id = favorite_id


__all__ = ["DuplicateError", "NotFoundError"]
