from __future__ import annotations

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, slots=True)
class ChildIn:
    """
    Input DTO for creating a child.

    :param first_name: Given name.
    :param date_of_birth: Birth date; must not lie in the future.
    :param last_name: Family name.
    :param sex: ``female`` | ``male`` | ``other`` | ``unspecified``.
    """

    first_name: str
    date_of_birth: date
    last_name: str | None = None
    sex: str = "unspecified"


@dataclass(frozen=True, slots=True)
class ChildOut:
    id: int
    first_name: str
    last_name: str | None
    date_of_birth: date
    sex: str
