from .catalog import Company, Product
from .stock import (
    StockRecord,
    FreeStockRecord,
    ExternalItem,
    StockHistory,
    FreeStockHistory,
    ExternalItemStockHistory,
)
from .offers import Offer, OfferPool, OfferPoolHistory
from .customers import Customer

__all__ = [
    'Company', 'Product',
    'StockRecord', 'FreeStockRecord', 'ExternalItem',
    'StockHistory', 'FreeStockHistory', 'ExternalItemStockHistory',
    'Offer', 'OfferPool', 'OfferPoolHistory',
    'Customer',
]
