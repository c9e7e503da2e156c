"""
Verrous applicatifs par produit.

Complètent le `SELECT ... FOR UPDATE`: SQLite ignore les verrous de ligne, le
verrou asyncio sérialise donc la lecture-modification-écriture d'un même
produit au sein du processus. Deux produits différents ne se bloquent jamais.
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, Optional

from cleanops.stock_movements.config import stock_settings
from cleanops.stock_movements.constants import ERROR_LOCK_TIMEOUT
from cleanops.stock_movements.exceptions import StockTransactionError

logger = logging.getLogger(__name__)


class ProductLockRegistry:
    def __init__(self, timeout: Optional[float] = None):
        self.timeout = timeout
        self._locks: Dict[int, asyncio.Lock] = {}
        # Détenteurs et tâches en attente par produit
        self._users: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, product_id: int) -> AsyncIterator[None]:
        """Détient le verrou exclusif du produit pendant le bloc."""
        lock = self._locks.setdefault(product_id, asyncio.Lock())
        self._users[product_id] = self._users.get(product_id, 0) + 1
        try:
            try:
                async with asyncio.timeout(self.timeout):
                    await lock.acquire()
            except TimeoutError as e:
                logger.error(f"[ProductLockRegistry] {ERROR_LOCK_TIMEOUT} {product_id} après {self.timeout}s")
                raise StockTransactionError(f"{ERROR_LOCK_TIMEOUT} {product_id}.") from e
            try:
                yield
            finally:
                lock.release()
        finally:
            self._users[product_id] -= 1
            if not self._users[product_id]:
                del self._users[product_id]
                del self._locks[product_id]


product_locks = ProductLockRegistry(timeout=stock_settings.LOCK_TIMEOUT_SECONDS)

def get_product_locks() -> ProductLockRegistry:
    return product_locks
