import asyncio
import logging

from ledger.store import LedgerSnapshot, LedgerStore

logger = logging.getLogger(__name__)


class AsyncLedgerStore:
    """Async facade over a LedgerStore, shaped like a remote backend client."""

    def __init__(self, store: LedgerStore):
        self.store = store

    async def fetch_accounts(self):
        await asyncio.sleep(0)
        return self.store.fetch_accounts()

    async def fetch_transactions(self):
        await asyncio.sleep(0)
        return self.store.fetch_transactions()

    async def fetch_goals(self):
        await asyncio.sleep(0)
        return self.store.fetch_goals()

    async def fetch_categories(self):
        return self.store.fetch_categories()


async def load_snapshot(source) -> LedgerSnapshot:
    """Fetch accounts, transactions and goals concurrently into one snapshot."""
    accounts, transactions, goals = await asyncio.gather(
        source.fetch_accounts(),
        source.fetch_transactions(),
        source.fetch_goals(),
    )
    categories = await source.fetch_categories()
    logger.info(
        "loaded snapshot: %d accounts, %d transactions, %d goals",
        len(accounts), len(transactions), len(goals),
    )
    return LedgerSnapshot(tuple(accounts), tuple(transactions), tuple(categories), tuple(goals))
