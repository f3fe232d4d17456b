"""Lookup of recipient email addresses."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Protocol


class UserDirectory(Protocol):
    """Resolve a user identifier into the address notifications are sent to."""

    async def resolve_email(self, user_id: str) -> str | None:
        ...


class StaticUserDirectory:
    """Directory backed by a fixed ``user_id -> email`` mapping."""

    def __init__(self, emails: Mapping[str, str] | None = None) -> None:
        self._emails = {
            str(user_id): email.strip()
            for user_id, email in (emails or {}).items()
            if email and email.strip()
        }

    async def resolve_email(self, user_id: str) -> str | None:
        return self._emails.get(user_id)


__all__ = ["StaticUserDirectory", "UserDirectory"]
