from datetime import datetime, timezone

import pytest

from identity_server.core.cache import cache_key
from identity_server.core.exceptions import LedgerUnavailable
from identity_server.infrastructure.database.repositories import SqlIdentityRepository, SqlTransactionRepository
from identity_server.modules.transactions import ReconciliationService, SyncResult, TransactionStatus
from identity_server.modules.transactions.models import NewTransaction

pytestmark = pytest.mark.anyio


async def _sync(session_factory, ledger, wallet_key, cache=None, limit=50):
    async with session_factory() as session:
        return await ReconciliationService.with_session(session, ledger, cache).sync(wallet_key, limit)


async def _records(session_factory, wallet_key):
    async with session_factory() as session:
        items, total = await SqlTransactionRepository(session).list_for_wallet(wallet_key, limit=None)
    return {item.signature: item for item in items}, total


async def _identity(session_factory, wallet_key):
    async with session_factory() as session:
        return await SqlIdentityRepository(session).get(wallet_key)


@pytest.fixture
def seeded(ledger, wallet):
    ledger.add_transaction(wallet.address, "sig-a", slot=103)
    ledger.add_transaction(wallet.address, "sig-b", slot=102, confirmation_status="finalized")
    ledger.add_transaction(wallet.address, "sig-c", slot=101, delta=2_500_000_000)
    return wallet


async def test_sync_is_idempotent_and_tracks_status_changes(session_factory, ledger, seeded):
    wallet_key = seeded.address

    assert await _sync(session_factory, ledger, wallet_key) == SyncResult(fetched=3, created=3, updated=0)
    assert await _sync(session_factory, ledger, wallet_key) == SyncResult(fetched=3, created=0, updated=0)

    ledger.set_status(wallet_key, "sig-a", err={"InstructionError": [0, "Custom"]})
    assert await _sync(session_factory, ledger, wallet_key) == SyncResult(fetched=3, created=0, updated=1)

    records, total = await _records(session_factory, wallet_key)
    assert total == 3
    assert records["sig-a"].status == TransactionStatus.FAILED.value
    assert records["sig-b"].status == TransactionStatus.FINALIZED.value
    assert records["sig-c"].status == TransactionStatus.CONFIRMED.value


async def test_amount_and_fee_are_stored_in_sol(session_factory, ledger, seeded):
    await _sync(session_factory, ledger, seeded.address)
    records, _ = await _records(session_factory, seeded.address)

    assert records["sig-a"].fee == pytest.approx(0.000005)
    assert records["sig-a"].amount == pytest.approx(1.0)
    assert records["sig-c"].amount == pytest.approx(2.5)
    assert records["sig-a"].category == "other"
    assert records["sig-a"].slot == 103


async def test_aggregates_match_stored_rows(session_factory, ledger, seeded):
    await _sync(session_factory, ledger, seeded.address)
    await _sync(session_factory, ledger, seeded.address)

    identity = await _identity(session_factory, seeded.address)
    assert identity.transaction_count == 3
    assert identity.total_volume == pytest.approx(4.5)


async def test_per_item_failures_are_skipped(session_factory, ledger, seeded):
    ledger.failing_details.add("sig-b")
    assert await _sync(session_factory, ledger, seeded.address) == SyncResult(fetched=2, created=2, updated=0)

    ledger.failing_details.clear()
    assert await _sync(session_factory, ledger, seeded.address) == SyncResult(fetched=3, created=1, updated=0)


async def test_unexpected_item_errors_are_skipped(session_factory, ledger, seeded):
    ledger.detail_errors["sig-b"] = TimeoutError("rpc timed out")
    ledger.detail_errors["sig-c"] = KeyError("meta")

    assert await _sync(session_factory, ledger, seeded.address) == SyncResult(fetched=1, created=1, updated=0)

    ledger.detail_errors.pop("sig-c")
    assert await _sync(session_factory, ledger, seeded.address) == SyncResult(fetched=2, created=1, updated=0)
    identity = await _identity(session_factory, seeded.address)
    assert identity.transaction_count == 2


class FailingInsertRepository(SqlTransactionRepository):
    """Raises on insert of one signature, after earlier rows were committed."""

    def __init__(self, session, broken: str) -> None:
        super().__init__(session)
        self.broken = broken

    async def insert(self, transaction):
        if transaction.signature == self.broken:
            raise RuntimeError("disk full")
        return await super().insert(transaction)


async def test_aborted_batch_still_refreshes_aggregates_and_cache(session_factory, ledger, cache, seeded):
    cache.set(cache_key("profile", seeded.address), "stale")

    async with session_factory() as session:
        service = ReconciliationService(
            FailingInsertRepository(session, "sig-c"),
            SqlIdentityRepository(session),
            ledger,
            cache,
        )
        with pytest.raises(RuntimeError):
            await service.sync(seeded.address)

    _, total = await _records(session_factory, seeded.address)
    assert total == 2
    identity = await _identity(session_factory, seeded.address)
    assert identity.transaction_count == 2
    assert identity.total_volume == pytest.approx(2.0)
    assert not cache.has(cache_key("profile", seeded.address))

async def test_missing_detail_is_skipped(session_factory, ledger, seeded):
    del ledger.details["sig-c"]
    assert await _sync(session_factory, ledger, seeded.address) == SyncResult(fetched=2, created=2, updated=0)


async def test_listing_failure_propagates(session_factory, ledger, seeded):
    ledger.fail_summaries = True
    with pytest.raises(LedgerUnavailable):
        await _sync(session_factory, ledger, seeded.address)

    _, total = await _records(session_factory, seeded.address)
    assert total == 0


async def test_duplicate_signature_within_one_batch(session_factory, ledger, wallet):
    ledger.add_transaction(wallet.address, "sig-dup")
    ledger.summaries[wallet.address].append(ledger.summaries[wallet.address][0])

    assert await _sync(session_factory, ledger, wallet.address) == SyncResult(fetched=2, created=1, updated=0)
    _, total = await _records(session_factory, wallet.address)
    assert total == 1


async def test_limit_bounds_the_batch(session_factory, ledger, seeded):
    assert await _sync(session_factory, ledger, seeded.address, limit=2) == SyncResult(fetched=2, created=2, updated=0)


class RacingTransactionRepository(SqlTransactionRepository):
    """Hides rows from the first lookup, as if another sync inserted them meanwhile."""

    def __init__(self, session) -> None:
        super().__init__(session)
        self.hidden: set[str] = set()

    async def get_by_signature(self, signature):
        if signature in self.hidden:
            self.hidden.discard(signature)
            return None
        return await super().get_by_signature(signature)


async def test_concurrent_insert_falls_back_to_update(session_factory, ledger, wallet):
    ledger.add_transaction(wallet.address, "sig-race", confirmation_status="finalized")
    summary = ledger.summaries[wallet.address][0]

    async with session_factory() as session:
        await SqlIdentityRepository(session).get_or_create(wallet.address)
        await SqlTransactionRepository(session).insert(
            NewTransaction(
                signature="sig-race",
                wallet_key=wallet.address,
                block_time=datetime.fromtimestamp(summary.block_time, tz=timezone.utc),
                slot=summary.slot,
                status=TransactionStatus.CONFIRMED.value,
                fee=0.000005,
            )
        )
        await session.commit()

    async with session_factory() as session:
        transactions = RacingTransactionRepository(session)
        transactions.hidden.add("sig-race")
        service = ReconciliationService(transactions, SqlIdentityRepository(session), ledger)
        result = await service.sync(wallet.address)

    assert result == SyncResult(fetched=1, created=0, updated=1)
    records, total = await _records(session_factory, wallet.address)
    assert total == 1
    assert records["sig-race"].status == TransactionStatus.FINALIZED.value


async def test_sync_invalidates_wallet_cache(session_factory, ledger, cache, seeded, make_wallet):
    other = make_wallet().address
    cache.set(cache_key("balance", seeded.address), "stale")
    cache.set(cache_key("transactions", seeded.address, "stats", "-", "-"), "stale")
    cache.set(cache_key("balance", other), "keep")

    await _sync(session_factory, ledger, seeded.address, cache=cache)

    assert not cache.has(cache_key("balance", seeded.address))
    assert not cache.has(cache_key("transactions", seeded.address, "stats", "-", "-"))
    assert cache.get(cache_key("balance", other)) == "keep"
