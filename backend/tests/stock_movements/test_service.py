"""
Tests unitaires du StockAdjustmentService (notifier simulé avec AsyncMock).
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import select

from cleanops.products.repositories import ProductRepository
from cleanops.products.status import StockStatus
from cleanops.stock_movements.config import StockSettings
from cleanops.stock_movements.exceptions import InsufficientStockError, StockValidationError
from cleanops.stock_movements.locks import ProductLockRegistry
from cleanops.stock_movements.models import StockMovement
from cleanops.stock_movements.service import StockAdjustmentService
from cleanops.users.models import UserRead, UserRole

pytestmark = pytest.mark.asyncio


@pytest.fixture
def actor(assistant_user) -> UserRead:
    return UserRead(
        id=assistant_user.id,
        email=assistant_user.email,
        first_name=assistant_user.first_name,
        last_name=assistant_user.last_name,
        role=UserRole.ASSISTANT,
        is_active=True,
        created_at=datetime(2024, 1, 1),
    )

@pytest.fixture
def notifier() -> AsyncMock:
    return AsyncMock()

def _service(session, notifier, enable_alerts: bool = True) -> StockAdjustmentService:
    return StockAdjustmentService(
        db=session,
        product_repo=ProductRepository(session),
        locks=ProductLockRegistry(timeout=5),
        notifier=notifier,
        settings=StockSettings(ENABLE_STOCK_ALERTS=enable_alerts),
    )


async def test_notification_failure_does_not_undo_movement(session_factory, test_product, actor, notifier):
    notifier.emit_movement.side_effect = RuntimeError("base des notifications indisponible")
    notifier.emit_stock_alert.side_effect = RuntimeError("base des notifications indisponible")

    async with session_factory() as session:
        result = await _service(session, notifier).record_exit(
            product_id=test_product.id, quantity=Decimal("9"), destination="Site", actor=actor
        )

    assert result.product.quantity == Decimal("1")
    assert result.product.status == StockStatus.ALERT
    notifier.emit_movement.assert_awaited_once()
    notifier.emit_stock_alert.assert_awaited_once()

    async with session_factory() as session:
        movements = (await session.execute(select(StockMovement))).scalars().all()
    assert len(movements) == 1
    assert movements[0].quantity_after == Decimal("1")

async def test_entry_never_emits_stock_alert(session_factory, make_product, actor, notifier):
    product = await make_product(quantity="0", alert_threshold="5")
    async with session_factory() as session:
        result = await _service(session, notifier).record_entry(
            product_id=product.id, quantity=Decimal("1"), actor=actor
        )

    assert result.product.status == StockStatus.ALERT
    notifier.emit_movement.assert_awaited_once()
    notifier.emit_stock_alert.assert_not_awaited()

async def test_stock_alerts_can_be_disabled(session_factory, test_product, actor, notifier):
    async with session_factory() as session:
        await _service(session, notifier, enable_alerts=False).record_exit(
            product_id=test_product.id, quantity=Decimal("10"), destination="Site", actor=actor
        )

    notifier.emit_movement.assert_awaited_once()
    notifier.emit_stock_alert.assert_not_awaited()

async def test_exit_validation_happens_before_any_read(actor, notifier):
    product_repo = MagicMock()
    product_repo.get_for_update = AsyncMock()
    locks = MagicMock()
    service = StockAdjustmentService(
        db=AsyncMock(), product_repo=product_repo, locks=locks, notifier=notifier, settings=StockSettings()
    )

    with pytest.raises(StockValidationError) as exc_info:
        await service.record_exit(product_id=1, quantity=Decimal("1"), destination="", actor=actor)
    assert exc_info.value.field == "destination"

    with pytest.raises(StockValidationError) as exc_info:
        await service.record_exit(product_id=1, quantity=Decimal("-2"), destination="Site", actor=actor)
    assert exc_info.value.field == "quantity"

    locks.hold.assert_not_called()
    product_repo.get_for_update.assert_not_awaited()
    notifier.emit_movement.assert_not_awaited()

async def test_insufficient_stock_error_carries_available_quantity(session_factory, test_product, actor, notifier):
    async with session_factory() as session:
        with pytest.raises(InsufficientStockError) as exc_info:
            await _service(session, notifier).record_exit(
                product_id=test_product.id, quantity=Decimal("10.5"), destination="Site", actor=actor
            )

    assert exc_info.value.available == Decimal("10")
    assert exc_info.value.requested == Decimal("10.5")
    notifier.emit_movement.assert_not_awaited()
