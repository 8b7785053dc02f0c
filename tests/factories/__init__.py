"""Test data factories using factory_boy.

These factories generate realistic test data for CascadeWatch models.
"""

from tests.factories.transaction import PendingTransactionFactory, random_address, random_hash

__all__ = [
    "PendingTransactionFactory",
    "random_address",
    "random_hash",
]
