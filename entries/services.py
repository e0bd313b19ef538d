"""
Entry service: the only place that touches both the entry store and the
entry cache.

Every write reaches the cache only after the store write succeeded, and a
cache hit is returned as-is (staleness is bounded by the cache TTL). The
store's ``uq_entry_owner_date`` constraint is the final word on uniqueness:
the existence check in ``create`` narrows the window, the constraint closes it.

Public operations return ``(result, AuditEvent)``. Persisting the event is the
caller's job (see ``audit.services.AuditRecorder``); failed operations produce
no event.
"""
from __future__ import annotations

import logging
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Tuple
from uuid import UUID

from django.conf import settings
from django.db import DatabaseError, IntegrityError, transaction

from audit.events import (
    AuditEvent,
    CreateEntryDetails,
    DeleteEntryDetails,
    UpdateEntryDetails,
    ViewEntriesDetails,
    ViewEntryDetails,
)

from .cache import EntryCache
from .exceptions import EntryConflict, EntryNotFound
from .models import ENTRY_FIELDS, Entry

logger = logging.getLogger(__name__)

Fields = Mapping[str, Optional[str]]


def filled_fields(fields: Fields) -> Tuple[str, ...]:
    return tuple(
        name for name in ENTRY_FIELDS
        if name in fields and fields[name] is not None and fields[name].strip()
    )


def requested_changes(fields: Fields) -> Dict[str, Optional[str]]:
    return {name: fields[name] for name in ENTRY_FIELDS if name in fields}


class EntryService:
    def __init__(self, cache: EntryCache, page_size: Optional[int] = None):
        self.cache = cache
        self.page_size = settings.ENTRIES_PAGE_SIZE if page_size is None else page_size

    # --- store helpers ---

    def _stored(self, owner_id: UUID, entry_date: date) -> Optional[Entry]:
        return Entry.objects.filter(owner_id=owner_id, date=entry_date).first()

    def _insert(self, owner_id: UUID, entry_date: date, fields: Fields) -> Entry:
        entry = Entry(owner_id=owner_id, date=entry_date)
        entry.apply_fields(fields)
        # savepoint: 제약 위반이 바깥 트랜잭션을 깨지 않도록
        with transaction.atomic():
            entry.save(force_insert=True)
        return entry

    def _merge(self, entry: Entry, fields: Fields) -> Entry:
        entry.apply_fields(fields)
        with transaction.atomic():
            entry.save(update_fields=[*requested_changes(fields), "updated_at"])
        return entry

    def _locate(self, owner_id: UUID, entry_date: date) -> Entry:
        entry = self.cache.get(owner_id, entry_date)
        if entry is not None:
            return entry

        entry = self._stored(owner_id, entry_date)
        if entry is None:
            logger.warning("entry not found owner=%s date=%s", owner_id, entry_date)
            raise EntryNotFound(entry_date)

        self.cache.set(owner_id, entry_date, entry)
        return entry

    # --- public operations ---

    def create(self, owner_id: UUID, entry_date: date, fields: Fields) -> Tuple[Entry, AuditEvent]:
        # 존재 확인은 항상 DB 에서 (캐시는 false negative 가능)
        if self._stored(owner_id, entry_date) is not None:
            logger.warning("entry create rejected, already exists owner=%s date=%s", owner_id, entry_date)
            raise EntryConflict(entry_date)

        try:
            entry = self._insert(owner_id, entry_date, fields)
        except IntegrityError:
            # 행이 생겼을 때만 중복; 그 외 (FK 등) 는 그대로 전파
            if self._stored(owner_id, entry_date) is None:
                raise
            logger.warning("entry create lost race owner=%s date=%s", owner_id, entry_date)
            raise EntryConflict(entry_date)

        self.cache.set(owner_id, entry_date, entry)
        logger.info("entry created owner=%s date=%s", owner_id, entry_date)

        details = CreateEntryDetails(entry_date=entry_date, fields_present=filled_fields(fields))
        return entry, AuditEvent.for_entry(owner_id, details)

    def create_or_update(self, owner_id: UUID, entry_date: date, fields: Fields) -> Tuple[Entry, AuditEvent]:
        entry = self._stored(owner_id, entry_date)
        details = None

        if entry is None:
            try:
                entry = self._insert(owner_id, entry_date, fields)
                details = CreateEntryDetails(entry_date=entry_date, fields_present=filled_fields(fields))
            except IntegrityError:
                # 동시에 다른 요청이 먼저 넣었다 → 그 행에 병합
                entry = self._stored(owner_id, entry_date)
                if entry is None:
                    raise

        if details is None:
            entry = self._merge(entry, fields)
            details = UpdateEntryDetails(entry_date=entry_date, changes=requested_changes(fields))

        self.cache.set(owner_id, entry_date, entry)
        logger.info("entry upserted owner=%s date=%s action=%s", owner_id, entry_date, details.action)
        return entry, AuditEvent.for_entry(owner_id, details)

    def find_one(self, owner_id: UUID, entry_date: date) -> Tuple[Entry, AuditEvent]:
        entry = self._locate(owner_id, entry_date)
        return entry, AuditEvent.for_entry(owner_id, ViewEntryDetails(entry_date=entry_date))

    def find_all(
        self,
        owner_id: UUID,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> Tuple[Dict[str, Any], AuditEvent]:
        limit = self.page_size if limit is None else limit

        qs = Entry.objects.filter(owner_id=owner_id).order_by("-date", "-id")
        total = qs.count()
        entries: List[Entry] = list(qs[offset:offset + limit])

        details = ViewEntriesDetails(limit=limit, offset=offset, total_returned=len(entries))
        return {"entries": entries, "total": total}, AuditEvent(details, actor_id=owner_id)

    def update(self, owner_id: UUID, entry_date: date, fields: Fields) -> Tuple[Entry, AuditEvent]:
        entry = self._locate(owner_id, entry_date)
        try:
            entry = self._merge(entry, fields)
        except DatabaseError:
            # 캐시에는 남아 있지만 DB 에서는 이미 삭제된 경우
            if self._stored(owner_id, entry_date) is not None:
                raise
            self.cache.delete(owner_id, entry_date)
            logger.warning("entry vanished before update owner=%s date=%s", owner_id, entry_date)
            raise EntryNotFound(entry_date)

        self.cache.set(owner_id, entry_date, entry)
        logger.info("entry updated owner=%s date=%s", owner_id, entry_date)

        details = UpdateEntryDetails(entry_date=entry_date, changes=requested_changes(fields))
        return entry, AuditEvent.for_entry(owner_id, details)

    def remove(self, owner_id: UUID, entry_date: date) -> Tuple[Dict[str, bool], AuditEvent]:
        entry = self._locate(owner_id, entry_date)
        Entry.objects.filter(pk=entry.pk).delete()

        self.cache.delete(owner_id, entry_date)
        logger.info("entry deleted owner=%s date=%s", owner_id, entry_date)

        return {"success": True}, AuditEvent.for_entry(owner_id, DeleteEntryDetails(entry_date=entry_date))


def build_entry_service() -> EntryService:
    return EntryService(cache=EntryCache())
