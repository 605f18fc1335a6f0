"""Transaction models for mock acquirer"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel


class Protocol(str, Enum):
    IDEAL = "ideal"
    IDIN = "idin"


class AcquirerTransaction(BaseModel):
    """A transaction as the acquirer keeps it"""
    transaction_id: str
    protocol: Protocol
    merchant_id: str
    issuer_id: str
    return_url: str
    entrance_code: str
    # iDEAL
    purchase_id: Optional[str] = None
    amount: Optional[str] = None
    currency: Optional[str] = None
    # iDIN
    request_id: Optional[str] = None
    attributes: int = 0
    status: str = "Open"
    created_at: datetime
    updated_at: datetime
