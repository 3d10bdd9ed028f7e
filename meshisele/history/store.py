from __future__ import annotations

import logging
import time
import uuid
from collections import Counter

from .models import HistoryCreateRequest, HistoryEntry, HistoryUpdateRequest

logger = logging.getLogger(__name__)

_entries: dict[str, list[HistoryEntry]] = {}
_popularity: Counter[tuple[str, str]] = Counter()


def add_entry(username: str, request: HistoryCreateRequest) -> HistoryEntry:
    entry = HistoryEntry(
        id=uuid.uuid4().hex,
        user=username,
        created_at=time.time(),
        **request.model_dump(),
    )
    _entries.setdefault(username, []).append(entry)
    if entry.is_decided:
        increment_popularity(entry.result_type, entry.result_id)
    return entry


def get_entries(username: str) -> list[HistoryEntry]:
    """Newest first."""
    return sorted(_entries.get(username, []), key=lambda e: e.created_at, reverse=True)


def get_entry(username: str, entry_id: str) -> HistoryEntry | None:
    for entry in _entries.get(username, []):
        if entry.id == entry_id:
            return entry
    return None


def update_entry(username: str, entry_id: str, update: HistoryUpdateRequest) -> HistoryEntry | None:
    entries = _entries.get(username, [])
    for idx, entry in enumerate(entries):
        if entry.id != entry_id:
            continue
        changes = update.model_dump(exclude_none=True)
        updated = entry.model_copy(update=changes)
        entries[idx] = updated
        return updated
    return None


def delete_entry(username: str, entry_id: str) -> bool:
    entries = _entries.get(username, [])
    remaining = [e for e in entries if e.id != entry_id]
    if len(remaining) == len(entries):
        return False
    _entries[username] = remaining
    return True


def delete_user_history(username: str) -> int:
    removed = _entries.pop(username, [])
    return len(removed)


def increment_popularity(result_type: str, result_id: str) -> int:
    _popularity[(result_type, result_id)] += 1
    logger.debug("Popularity of %s/%s is now %d", result_type, result_id, _popularity[(result_type, result_id)])
    return _popularity[(result_type, result_id)]


def get_popularity(result_type: str, result_id: str) -> int:
    return _popularity.get((result_type, result_id), 0)


def clear_history() -> None:
    _entries.clear()
    _popularity.clear()
