"""
Candidate user discovery.

The scheduler asks a CandidateSource for the users to poll on every tick.
Discovery itself is out of scope: the default source is a fixed list taken
from CANDIDATE_USER_IDS.
"""

from __future__ import annotations

from typing import Iterable, Protocol


class CandidateSource(Protocol):
    async def get_candidates(self) -> list[str]: ...


class StaticCandidateSource:
    """Fixed candidate list; blanks dropped, duplicates removed, order kept."""

    def __init__(self, user_ids: Iterable[str]) -> None:
        self._user_ids = list(dict.fromkeys(u.strip() for u in user_ids if u and u.strip()))
        if not self._user_ids:
            raise ValueError("user_ids must be non-empty")

    async def get_candidates(self) -> list[str]:
        return list(self._user_ids)
