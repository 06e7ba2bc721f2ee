from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ProfileOut:
    """Caller's contact details; every field is ``None`` until first saved."""

    user_id: int
    full_name: str | None
    phone: str | None
    address: str | None
    preferred_language: str | None
