from decimal import Decimal

import pytest

from cleanops.products.status import StockStatus, derive_stock_status


@pytest.mark.parametrize(
    "quantity, threshold, expected",
    [
        ("0", "10", StockStatus.OUT_OF_STOCK),
        ("-1", "10", StockStatus.OUT_OF_STOCK),
        ("0", "0", StockStatus.OUT_OF_STOCK),
        ("5", "10", StockStatus.ALERT),
        ("10", "10", StockStatus.ALERT),
        ("10.01", "10", StockStatus.OK),
        ("11", "10", StockStatus.OK),
        ("0.5", "0", StockStatus.OK),
    ],
)
def test_derive_stock_status(quantity, threshold, expected):
    assert derive_stock_status(Decimal(quantity), Decimal(threshold)) == expected
