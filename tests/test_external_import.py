"""Tests for ExternalImportService with a fake external source."""

from kontak.application import ExternalImportService, OperationFailed
from kontak.application.external_import import BATCH_SIZE, contact_from_source
from kontak.domain import Contact
from kontak.errors import StoreError
from kontak.infrastructure import InMemoryContactRepository


class FakeSource:
    def __init__(self, records, fail=False):
        self.records = records
        self.fail = fail
        self.closed = False

    def fetch_contacts(self):
        if self.fail:
            raise StoreError("auth failed")
        return self.records

    def close(self):
        self.closed = True


class CountingRepository(InMemoryContactRepository):
    def __init__(self):
        super().__init__()
        self.batches = []

    def add_many(self, contacts):
        self.batches.append(len(contacts))
        super().add_many(contacts)


def _service(repo, source, notifier, opened=None, workers=4):
    def opener(url, key, user):
        if opened is not None:
            opened.append((url, key, user))
        return source

    return ExternalImportService(repo, opener, notifier, max_workers=workers)


def test_contact_from_source_defaults():
    c = contact_from_source({"name": "", "phone": "", "ewallet": "dana"})
    assert c.name == "Unnamed"
    assert c.phone is None
    assert c.ewallet == ()


def test_import_in_batches_of_100(notifier):
    records = [{"name": f"C{i:03d}", "phone": f"08{i:04d}", "ewallet": ["dana"]} for i in range(250)]
    repo = CountingRepository()
    source = FakeSource(records)
    opened = []
    result = _service(repo, source, notifier, opened=opened).import_contacts(
        "bolt://source:7687", "secret", "reader"
    )
    assert result.count == 250
    assert result.message == "250 contacts imported!"
    assert repo.batches == [BATCH_SIZE, BATCH_SIZE, 50]
    assert len(repo.list_all()) == 250
    assert opened == [("bolt://source:7687", "secret", "reader")]
    assert source.closed


def test_import_empty_source(notifier):
    repo = CountingRepository()
    result = _service(repo, FakeSource([]), notifier).import_contacts("bolt://x", "k")
    assert result.count == 0
    assert repo.batches == []


def test_import_source_failure(notifier):
    source = FakeSource([], fail=True)
    result = _service(CountingRepository(), source, notifier).import_contacts("bolt://x", "k")
    assert isinstance(result, OperationFailed)
    assert "auth failed" in result.error
    assert source.closed


def test_import_stops_at_failed_batch(notifier):
    class FailSecond(CountingRepository):
        def add_many(self, contacts):
            if len(self.batches) == 1:
                self.batches.append(len(contacts))
                raise StoreError("disk full")
            super().add_many(contacts)

    records = [{"name": f"C{i}"} for i in range(150)]
    repo = FailSecond()
    result = _service(repo, FakeSource(records), notifier).import_contacts("bolt://x", "k")
    assert isinstance(result, OperationFailed)
    assert "disk full" in result.error
    assert len(repo.list_all()) == BATCH_SIZE


def test_sync_ewallets_updates_matching_phones(notifier):
    repo = InMemoryContactRepository()
    repo.add_many([
        Contact(name="Budi", phone="081234"),
        Contact(name="Sari", phone="0899", ewallet=("ovo",)),
        Contact(name="Ani", phone="0877", ewallet=("gopay",)),
    ])
    records = [
        {"name": "Budi", "phone": "0812-34", "ewallet": ["dana"]},
        {"name": "Sari", "phone": "0899", "ewallet": ["ovo"]},  # unchanged
        {"name": "Nobody", "phone": "0000", "ewallet": ["dana"]},  # no local match
        {"name": "Ani", "phone": "0877"},  # no tags
    ]
    result = _service(repo, FakeSource(records), notifier, workers=2).sync_ewallets("bolt://x", "k")
    assert result.updated == 1
    assert result.failed == 0
    assert repo.find_by_phone("081234").ewallet == ("dana",)
    assert repo.find_by_phone("0877").ewallet == ("gopay",)


def test_sync_counts_failures_without_detail(notifier):
    class FlakyRepository(InMemoryContactRepository):
        def update(self, contact):
            if contact.name == "Sari":
                raise StoreError("boom")
            return super().update(contact)

    repo = FlakyRepository()
    repo.add_many([Contact(name="Budi", phone="0812"), Contact(name="Sari", phone="0899")])
    records = [
        {"phone": "0812", "ewallet": ["dana"]},
        {"phone": "0899", "ewallet": ["ovo"]},
    ]
    result = _service(repo, FakeSource(records), notifier).sync_ewallets("bolt://x", "k")
    assert result.updated == 1
    assert result.failed == 1
    assert result.message == "1 contacts updated!"
