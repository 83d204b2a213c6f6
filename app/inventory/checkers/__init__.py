"""
Tier-1 checker exports.
"""

from app.inventory.checkers.base import StockCheckerBase
from app.inventory.checkers.json_api import JSONAPIChecker
from app.inventory.checkers.restricted import AccessRestrictedChecker
from app.inventory.checkers.storefront import StructuredStorefrontChecker

__all__ = [
    "AccessRestrictedChecker",
    "JSONAPIChecker",
    "StockCheckerBase",
    "StructuredStorefrontChecker",
]
