"""User record, consumed from the identity side, never mutated here."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class User:

    id: int
    username: str
