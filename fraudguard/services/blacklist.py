"""Blacklist management over the blacklisted_recipients table"""

from dataclasses import dataclass
from typing import List, Optional

from fraudguard.domain.exceptions import ConflictError
from fraudguard.domain.models import BlacklistEntry
from fraudguard.infrastructure.backend.base import DataAccess, Query
from fraudguard.infrastructure.backend.rows import decode_blacklist_entry, decode_rows
from fraudguard.infrastructure.observability.metrics import blacklist_outcome_counter

TABLE = "blacklisted_recipients"
ADDED = "added"
DUPLICATE = "duplicate"
DUPLICATE_MESSAGE = "Already blacklisted"


@dataclass
class BlacklistOutcome:
    outcome: str  # added | duplicate
    entry: Optional[BlacklistEntry] = None
    message: Optional[str] = None

    @property
    def added(self) -> bool:
        return self.outcome == ADDED


class BlacklistService:
    def __init__(self, data: DataAccess):
        self.data = data

    async def lookup(self, recipient_value: str) -> Optional[BlacklistEntry]:
        rows = await self.data.select(Query.select(TABLE).eq("recipient_value", recipient_value))
        entries = decode_rows(rows, decode_blacklist_entry, TABLE)
        return entries[0] if entries else None

    async def list_entries(self) -> List[BlacklistEntry]:
        rows = await self.data.select(Query.select(TABLE))
        entries = decode_rows(rows, decode_blacklist_entry, TABLE)
        return sorted(entries, key=lambda e: e.id, reverse=True)

    async def add(self, recipient_value: str, reason: Optional[str], created_by: Optional[str]) -> BlacklistOutcome:
        """
        Blacklist a recipient.

        A unique-key conflict is reported as a duplicate outcome; every other
        DataAccessError propagates to the caller.
        """
        recipient_value = (recipient_value or "").strip()
        if not recipient_value:
            raise ValueError("recipient_value must not be empty")

        record = {
            "recipient_value": recipient_value,
            "reason": (reason or "").strip() or None,
            "created_by": created_by,
        }
        try:
            row = await self.data.insert(TABLE, record)
        except ConflictError:
            blacklist_outcome_counter.labels(action="add", outcome=DUPLICATE).inc()
            return BlacklistOutcome(outcome=DUPLICATE, message=DUPLICATE_MESSAGE)

        blacklist_outcome_counter.labels(action="add", outcome=ADDED).inc()
        entry = decode_rows([row], decode_blacklist_entry, TABLE)[0]
        return BlacklistOutcome(outcome=ADDED, entry=entry)

    async def remove(self, entry_id: int) -> bool:
        removed = await self.data.delete(TABLE, "id", entry_id)
        blacklist_outcome_counter.labels(action="remove", outcome="removed" if removed else "missing").inc()
        return removed > 0
