# Database modules

from .transactions import TransactionDatabase
from .issuers import ISSUERS, consumer_attributes, issuer_ids

__all__ = [
    "TransactionDatabase",
    "ISSUERS",
    "consumer_attributes",
    "issuer_ids",
]
