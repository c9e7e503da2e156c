import asyncio

import pytest

from cleanops.stock_movements.exceptions import StockTransactionError
from cleanops.stock_movements.locks import ProductLockRegistry

pytestmark = pytest.mark.asyncio


async def test_same_product_is_serialized():
    locks = ProductLockRegistry(timeout=1)
    events = []

    async def worker(name: str):
        async with locks.hold(1):
            events.append(f"{name}-start")
            await asyncio.sleep(0.01)
            events.append(f"{name}-end")

    await asyncio.gather(worker("a"), worker("b"))
    assert events in (["a-start", "a-end", "b-start", "b-end"], ["b-start", "b-end", "a-start", "a-end"])

async def test_different_products_do_not_block_each_other():
    locks = ProductLockRegistry(timeout=0.2)
    async with locks.hold(1):
        async with locks.hold(2):
            pass

async def test_lock_timeout_raises_transaction_error():
    locks = ProductLockRegistry(timeout=0.05)
    async with locks.hold(1):
        with pytest.raises(StockTransactionError):
            async with locks.hold(1):
                pass

    # Le verrou est relâché après le bloc
    async with locks.hold(1):
        pass
    assert len(locks) == 0

async def test_registry_forgets_released_products():
    locks = ProductLockRegistry(timeout=1)
    async with locks.hold(1):
        async with locks.hold(2):
            assert len(locks) == 2
    assert len(locks) == 0

async def test_waiter_keeps_entry_until_it_is_done():
    locks = ProductLockRegistry(timeout=1)
    entered = asyncio.Event()
    release = asyncio.Event()

    async def holder():
        async with locks.hold(1):
            entered.set()
            await release.wait()

    async def waiter():
        async with locks.hold(1):
            return len(locks)

    holder_task = asyncio.create_task(holder())
    await entered.wait()
    waiter_task = asyncio.create_task(waiter())
    await asyncio.sleep(0.01)
    release.set()
    await holder_task

    # Le détenteur parti, l'attente réutilise la même entrée
    assert await waiter_task == 1
    assert len(locks) == 0

async def test_lock_stays_usable_after_timeout_under_contention():
    locks = ProductLockRegistry(timeout=0.05)
    entered = asyncio.Event()
    release = asyncio.Event()

    async def holder():
        async with locks.hold(1):
            entered.set()
            await release.wait()

    async def attempt():
        async with locks.hold(1):
            pass

    holder_task = asyncio.create_task(holder())
    await entered.wait()
    results = await asyncio.gather(*(attempt() for _ in range(3)), return_exceptions=True)
    assert all(isinstance(r, StockTransactionError) for r in results)
    release.set()
    await holder_task

    # Aucune attente expirée n'a laissé le verrou acquis
    async with locks.hold(1):
        pass
    assert len(locks) == 0
