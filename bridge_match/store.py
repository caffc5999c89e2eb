"""
Profile and match storage.

Responsibilities:
- Look up profiles by id or role.
- Persist match records and their accept/reject status.

Non-Responsibilities:
- No scoring; callers hand in finished ``MatchRecord`` objects.

Both stores are passed explicitly to the functions that need them, so a
managed backend can be swapped in by implementing the same protocol.
"""
from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

import pandas as pd

from .data_models import MatchRecord, Profile, Role
from .ingest import profiles_to_frame, read_profiles, records_from_frame, records_to_frame

logger = logging.getLogger(__name__)


class ProfileNotFoundError(KeyError):
    """Raised when a profile id is unknown to the store."""


class MatchNotFoundError(KeyError):
    """Raised when a match id is unknown to the repository."""


class ProfileStore(Protocol):
    def get(self, uid: str) -> Profile: ...

    def all(self) -> List[Profile]: ...

    def by_role(self, role: Role) -> List[Profile]: ...


class MatchRepository(Protocol):
    def add(self, record: MatchRecord) -> MatchRecord: ...

    def get(self, match_id: str) -> MatchRecord: ...

    def find_pair(self, uid_a: str, uid_b: str) -> Optional[MatchRecord]: ...

    def for_user(self, uid: str) -> List[MatchRecord]: ...

    def update(self, record: MatchRecord) -> MatchRecord: ...


class InMemoryProfileStore:
    """Dict-backed ProfileStore, keyed by uid, preserving insertion order."""

    def __init__(self, profiles: Iterable[Profile] = ()):
        self._profiles: Dict[str, Profile] = {}
        for profile in profiles:
            self.add(profile)

    @classmethod
    def from_csv(cls, csv_path: Path, strict: bool = True) -> "InMemoryProfileStore":
        profiles = read_profiles(csv_path, strict=strict)
        logger.info("Loaded %d profiles from %s", len(profiles), csv_path)
        return cls(profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def __contains__(self, uid: object) -> bool:
        return uid in self._profiles

    def add(self, profile: Profile) -> Profile:
        if profile.uid in self._profiles:
            raise ValueError(f"Profile {profile.uid} already exists")
        self._profiles[profile.uid] = profile
        return profile

    def get(self, uid: str) -> Profile:
        try:
            return self._profiles[uid]
        except KeyError:
            raise ProfileNotFoundError(uid) from None

    def all(self) -> List[Profile]:
        return list(self._profiles.values())

    def by_role(self, role: Role) -> List[Profile]:
        return [p for p in self._profiles.values() if p.role == role]

    def update(self, uid: str, /, **changes: Any) -> Profile:
        """Apply field changes and re-validate. The uid itself cannot change."""
        current = self.get(uid)
        changes.pop("uid", None)
        payload = current.model_dump()
        payload.update(changes)
        updated = Profile.model_validate(payload)
        self._profiles[uid] = updated
        return updated

    def remove(self, uid: str) -> None:
        if uid not in self._profiles:
            raise ProfileNotFoundError(uid)
        del self._profiles[uid]

    def to_csv(self, csv_path: Path) -> None:
        csv_path.parent.mkdir(parents=True, exist_ok=True)
        profiles_to_frame(self.all()).to_csv(csv_path, index=False)


class InMemoryMatchRepository:
    """Dict-backed MatchRepository with a pair index for duplicate checks."""

    def __init__(self, records: Iterable[MatchRecord] = ()):
        self._records: Dict[str, MatchRecord] = {}
        self._pairs: Dict[frozenset, str] = {}
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._records)

    def add(self, record: MatchRecord) -> MatchRecord:
        pair = frozenset((record.user1_id, record.user2_id))
        if pair in self._pairs:
            raise ValueError(
                f"A match between {record.user1_id} and {record.user2_id} already exists"
            )
        self._records[record.id] = record
        self._pairs[pair] = record.id
        return record

    def get(self, match_id: str) -> MatchRecord:
        try:
            return self._records[match_id]
        except KeyError:
            raise MatchNotFoundError(match_id) from None

    def find_pair(self, uid_a: str, uid_b: str) -> Optional[MatchRecord]:
        match_id = self._pairs.get(frozenset((uid_a, uid_b)))
        return self._records[match_id] if match_id is not None else None

    def for_user(self, uid: str) -> List[MatchRecord]:
        records = [r for r in self._records.values() if r.involves(uid)]
        records.sort(key=lambda r: r.compatibility_score, reverse=True)
        return records

    def all(self) -> List[MatchRecord]:
        return list(self._records.values())

    def update(self, record: MatchRecord) -> MatchRecord:
        if record.id not in self._records:
            raise MatchNotFoundError(record.id)
        stored = record.model_copy(update={"updated_at": datetime.now()})
        self._records[record.id] = stored
        return stored


class CsvMatchRepository(InMemoryMatchRepository):
    """In-memory repository loaded from, and flushed back to, a CSV file."""

    def __init__(self, csv_path: Path):
        self.csv_path = csv_path
        records: List[MatchRecord] = []
        if csv_path.exists() and csv_path.stat().st_size > 0:
            df = pd.read_csv(csv_path, dtype={"id": str, "user1_id": str, "user2_id": str})
            records = records_from_frame(df)
            logger.info("Loaded %d matches from %s", len(records), csv_path)
        super().__init__(records)

    def flush(self) -> None:
        self.csv_path.parent.mkdir(parents=True, exist_ok=True)
        records_to_frame(self.all()).to_csv(self.csv_path, index=False)
        logger.info("Wrote %d matches to %s", len(self), self.csv_path)
