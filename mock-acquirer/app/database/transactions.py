"""Transaction storage for mock acquirer"""

import secrets
from datetime import datetime, timezone
from typing import Optional

from ..models.transaction import AcquirerTransaction, Protocol


class TransactionDatabase:
    """In-memory transaction storage"""

    def __init__(self, acquirer_id: str):
        self.acquirer_id = acquirer_id
        self.transactions: dict[str, AcquirerTransaction] = {}

    def _new_transaction_id(self) -> str:
        # acquirer ID followed by a unique number, 16 digits in total
        while True:
            number = "".join(secrets.choice("0123456789") for _ in range(16 - len(self.acquirer_id)))
            transaction_id = f"{self.acquirer_id}{number}"
            if transaction_id not in self.transactions:
                return transaction_id

    def create_transaction(
        self,
        protocol: Protocol,
        merchant_id: str,
        issuer_id: str,
        return_url: str,
        entrance_code: str,
        **details,
    ) -> AcquirerTransaction:
        """Create an Open transaction"""
        now = datetime.now(timezone.utc)
        transaction = AcquirerTransaction(
            transaction_id=self._new_transaction_id(),
            protocol=protocol,
            merchant_id=merchant_id,
            issuer_id=issuer_id,
            return_url=return_url,
            entrance_code=entrance_code,
            created_at=now,
            updated_at=now,
            **details,
        )
        self.transactions[transaction.transaction_id] = transaction
        return transaction

    def get_transaction(self, transaction_id: str) -> Optional[AcquirerTransaction]:
        """Get a transaction by ID"""
        return self.transactions.get(transaction_id)

    def update_status(self, transaction_id: str, status: str) -> Optional[AcquirerTransaction]:
        """Complete a transaction; final statuses are never changed again"""
        transaction = self.get_transaction(transaction_id)
        if not transaction:
            return None

        if transaction.status == "Open":
            transaction.status = status
            transaction.updated_at = datetime.now(timezone.utc)
        return transaction
