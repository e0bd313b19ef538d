"""Tests for the entry service: uniqueness, cache coherence, merge and events."""

from datetime import date, timedelta
from unittest.mock import patch

import pytest
from django.db import DatabaseError, IntegrityError

from audit.events import (
    CreateEntryDetails,
    DeleteEntryDetails,
    UpdateEntryDetails,
    ViewEntriesDetails,
    ViewEntryDetails,
)
from audit.models import AuditAction, AuditLog
from entries.cache import EntryCache
from entries.exceptions import EntryConflict, EntryNotFound
from entries.models import Entry
from entries.services import EntryService

pytestmark = pytest.mark.django_db

DAY = date(2025, 7, 18)


class DictBackend:
    """Minimal cache backend recording every call."""

    def __init__(self):
        self.data = {}
        self.calls = []

    def get(self, key, default=None):
        self.calls.append(("get", key))
        return self.data.get(key, default)

    def set(self, key, value, timeout=None):
        self.calls.append(("set", key, timeout))
        self.data[key] = value

    def delete(self, key):
        self.calls.append(("delete", key))
        self.data.pop(key, None)


class TestCreate:
    def test_persists_and_caches(self, service, entry_cache, user):
        entry, event = service.create(user.id, DAY, {"rose": "A"})

        assert entry.pk is not None
        assert Entry.objects.filter(owner=user, date=DAY).count() == 1
        assert entry_cache.get(user.id, DAY).rose == "A"

        assert isinstance(event.details, CreateEntryDetails)
        assert event.action == AuditAction.CREATE_ENTRY
        assert event.actor_id == user.id
        assert event.resource_id == "2025-07-18"
        assert event.details.fields_present == ("rose",)

    def test_second_create_same_date_conflicts(self, service, user):
        service.create(user.id, DAY, {"rose": "A"})

        with pytest.raises(EntryConflict):
            service.create(user.id, DAY, {"rose": "B"})

        assert Entry.objects.get(owner=user, date=DAY).rose == "A"

    def test_conflict_does_not_touch_cache(self, user):
        Entry.objects.create(owner=user, date=DAY, rose="A")
        backend = DictBackend()
        service = EntryService(cache=EntryCache(backend=backend, ttl=600))

        with pytest.raises(EntryConflict):
            service.create(user.id, DAY, {"rose": "B"})

        assert backend.calls == []

    def test_existence_check_ignores_cache(self, service, entry_cache, user):
        # a cached snapshot with no backing row must not block create
        ghost = Entry(owner=user, date=DAY, rose="ghost")
        entry_cache.set(user.id, DAY, ghost)

        entry, _ = service.create(user.id, DAY, {"rose": "real"})
        assert entry.rose == "real"

    def test_unique_constraint_race_maps_to_conflict(self, service, user):
        Entry.objects.create(owner=user, date=DAY, rose="winner")

        # simulate losing the check-then-insert race
        winner = Entry.objects.get(owner=user, date=DAY)
        with patch.object(service, "_stored", side_effect=[None, winner]):
            with pytest.raises(EntryConflict):
                service.create(user.id, DAY, {"rose": "loser"})

        assert Entry.objects.filter(owner=user, date=DAY).count() == 1

    def test_integrity_error_without_row_is_not_a_conflict(self, service, user):
        # e.g. a foreign key violation: nothing exists for the date afterwards
        with patch.object(service, "_insert", side_effect=IntegrityError("FOREIGN KEY constraint failed")):
            with pytest.raises(IntegrityError):
                service.create(user.id, DAY, {"rose": "A"})

        assert not Entry.objects.exists()

    def test_same_date_for_different_owners(self, service, user, other_user):
        service.create(user.id, DAY, {"rose": "mine"})
        entry, _ = service.create(other_user.id, DAY, {"rose": "theirs"})
        assert entry.rose == "theirs"


class TestCreateOrUpdate:
    def test_upsert_merges_on_same_date(self, service, user):
        _, first = service.create_or_update(user.id, DAY, {"rose": "A"})
        entry, second = service.create_or_update(user.id, DAY, {"thorn": "B"})

        stored = Entry.objects.get(owner=user, date=DAY)
        assert (stored.rose, stored.thorn, stored.bud) == ("A", "B", None)
        assert entry.pk == stored.pk

        assert first.action == AuditAction.CREATE_ENTRY
        assert second.action == AuditAction.UPDATE_ENTRY
        assert second.details.changes == {"thorn": "B"}

    def test_upsert_never_conflicts(self, service, user):
        service.create(user.id, DAY, {"rose": "A"})
        entry, _ = service.create_or_update(user.id, DAY, {"rose": "B"})
        assert entry.rose == "B"

    def test_upsert_writes_cache(self, service, user, django_assert_num_queries):
        service.create_or_update(user.id, DAY, {"bud": "tomorrow"})

        with django_assert_num_queries(0):
            entry, _ = service.find_one(user.id, DAY)
        assert entry.bud == "tomorrow"

    def test_upsert_race_merges_into_winner(self, service, user):
        winner = Entry.objects.create(owner=user, date=DAY, rose="winner")

        with patch.object(service, "_stored", side_effect=[None, winner]):
            entry, event = service.create_or_update(user.id, DAY, {"thorn": "late"})

        stored = Entry.objects.get(owner=user, date=DAY)
        assert (stored.rose, stored.thorn) == ("winner", "late")
        assert entry.pk == winner.pk
        assert isinstance(event.details, UpdateEntryDetails)


class TestFindOne:
    def test_cache_hit_skips_store(self, service, user, django_assert_num_queries):
        service.create(user.id, DAY, {"rose": "A"})

        with django_assert_num_queries(0):
            entry, event = service.find_one(user.id, DAY)

        assert entry.rose == "A"
        assert isinstance(event.details, ViewEntryDetails)
        assert event.resource_id == "2025-07-18"

    def test_miss_reads_store_then_caches(self, service, entry_cache, user, django_assert_num_queries):
        Entry.objects.create(owner=user, date=DAY, thorn="rain")

        with django_assert_num_queries(1):
            service.find_one(user.id, DAY)
        assert entry_cache.get(user.id, DAY).thorn == "rain"

        with django_assert_num_queries(0):
            service.find_one(user.id, DAY)

    def test_missing_entry_raises_not_found(self, service, entry_cache, user):
        with pytest.raises(EntryNotFound):
            service.find_one(user.id, DAY)
        assert entry_cache.get(user.id, DAY) is None

    def test_cached_value_is_trusted_within_ttl(self, service, user):
        service.create(user.id, DAY, {"rose": "cached"})
        Entry.objects.filter(owner=user, date=DAY).update(rose="changed behind our back")

        entry, _ = service.find_one(user.id, DAY)
        assert entry.rose == "cached"

    def test_owner_isolation(self, service, user, other_user):
        service.create(user.id, DAY, {"rose": "mine"})
        with pytest.raises(EntryNotFound):
            service.find_one(other_user.id, DAY)


class TestFindAll:
    @pytest.fixture
    def fifteen(self, user):
        Entry.objects.bulk_create(
            [Entry(owner=user, date=DAY - timedelta(days=i), rose=f"day {i}") for i in range(15)]
        )

    def test_first_page(self, service, user, fifteen):
        page, event = service.find_all(user.id, 10, 0)

        assert len(page["entries"]) == 10
        assert page["total"] == 15
        assert page["entries"][0].date == DAY
        assert [e.date for e in page["entries"]] == sorted((e.date for e in page["entries"]), reverse=True)

        assert isinstance(event.details, ViewEntriesDetails)
        assert (event.details.limit, event.details.offset, event.details.total_returned) == (10, 0, 10)
        assert event.resource_id is None

    def test_second_page(self, service, user, fifteen):
        page, event = service.find_all(user.id, 10, 10)
        assert len(page["entries"]) == 5
        assert page["total"] == 15
        assert event.details.total_returned == 5

    def test_default_page_size_from_settings(self, user, fifteen, settings):
        settings.ENTRIES_PAGE_SIZE = 4
        service = EntryService(cache=EntryCache())

        page, event = service.find_all(user.id)
        assert len(page["entries"]) == 4
        assert event.details.limit == 4

    def test_only_own_entries(self, service, user, other_user, fifteen):
        page, _ = service.find_all(other_user.id)
        assert page == {"entries": [], "total": 0}


class TestUpdate:
    def test_partial_merge(self, service, user):
        service.create(user.id, DAY, {"rose": "a", "thorn": "b", "bud": "c"})

        entry, event = service.update(user.id, DAY, {"rose": "x"})

        stored = Entry.objects.get(owner=user, date=DAY)
        assert (stored.rose, stored.thorn, stored.bud) == ("x", "b", "c")
        assert (entry.rose, entry.thorn, entry.bud) == ("x", "b", "c")
        assert event.details.changes == {"rose": "x"}
        assert event.resource_id == "2025-07-18"

    def test_update_refreshes_cache(self, service, user, django_assert_num_queries):
        service.create(user.id, DAY, {"rose": "a"})
        service.update(user.id, DAY, {"bud": "soon"})

        with django_assert_num_queries(0):
            entry, _ = service.find_one(user.id, DAY)
        assert (entry.rose, entry.bud) == ("a", "soon")

    def test_update_missing_raises_not_found(self, service, entry_cache, user):
        missing = date(2099, 1, 1)

        with pytest.raises(EntryNotFound):
            service.update(user.id, missing, {"rose": "x"})

        assert not Entry.objects.filter(owner=user, date=missing).exists()
        assert entry_cache.get(user.id, missing) is None
        assert not AuditLog.objects.exists()

    def test_update_of_row_deleted_behind_cache_is_not_found(self, service, entry_cache, user):
        service.create(user.id, DAY, {"rose": "a"})
        Entry.objects.filter(owner=user, date=DAY).delete()
        assert entry_cache.get(user.id, DAY) is not None

        with pytest.raises(EntryNotFound):
            service.update(user.id, DAY, {"rose": "x"})

        assert entry_cache.get(user.id, DAY) is None
        assert not Entry.objects.exists()

    def test_other_store_errors_propagate(self, service, user):
        service.create(user.id, DAY, {"rose": "a"})

        with patch.object(Entry, "save", side_effect=DatabaseError("disk full")):
            with pytest.raises(DatabaseError):
                service.update(user.id, DAY, {"rose": "x"})

        assert Entry.objects.get(owner=user, date=DAY).rose == "a"


class TestRemove:
    def test_remove_deletes_row_and_cache(self, service, entry_cache, user):
        service.create(user.id, DAY, {"rose": "A"})

        result, event = service.remove(user.id, DAY)

        assert result == {"success": True}
        assert isinstance(event.details, DeleteEntryDetails)
        assert not Entry.objects.filter(owner=user, date=DAY).exists()
        assert entry_cache.get(user.id, DAY) is None

    def test_find_after_remove_is_not_found(self, service, user):
        service.create(user.id, DAY, {"rose": "A"})
        service.remove(user.id, DAY)

        with pytest.raises(EntryNotFound):
            service.find_one(user.id, DAY)

    def test_remove_missing_raises_not_found(self, service, user):
        with pytest.raises(EntryNotFound):
            service.remove(user.id, DAY)


class TestInjectedCache:
    def test_uses_injected_backend_and_ttl(self, user):
        backend = DictBackend()
        service = EntryService(cache=EntryCache(backend=backend, ttl=42))

        service.create(user.id, DAY, {"rose": "A"})
        key = f"entry:{user.id}:2025-07-18"
        assert ("set", key, 42) in backend.calls

        service.remove(user.id, DAY)
        assert ("delete", key) in backend.calls
        assert key not in backend.data

    def test_ttl_defaults_to_setting(self, settings):
        settings.ENTRY_CACHE_TTL = 123
        assert EntryCache(backend=DictBackend()).ttl == 123
