# Mock Acquirer Models

from .transaction import AcquirerTransaction, Protocol

__all__ = ["AcquirerTransaction", "Protocol"]
