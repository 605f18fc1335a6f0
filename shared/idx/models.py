"""iDEAL/iDIN Data Models"""

from dataclasses import dataclass, field
from enum import Enum, IntFlag
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey


class TransactionStatus(str, Enum):
    """Outcome of an iDEAL/iDIN transaction as reported by the acquirer"""
    SUCCESS = "Success"
    CANCELLED = "Cancelled"
    EXPIRED = "Expired"
    FAILURE = "Failure"
    OPEN = "Open"

    @property
    def is_final(self) -> bool:
        """Open is the only status that may still change"""
        return self != TransactionStatus.OPEN


class TransactionState(str, Enum):
    """Local lifecycle of a transaction handle"""
    CREATED = "created"
    STARTED = "started"


class IDINAttribute(IntFlag):
    """
    Bits in the bitmask of requested iDIN attributes.

    Request multiple attribute kinds by ORing them together.
    """
    BIN = 1 << 14  # 16384
    NAME = 1 << 12  # 4096
    ADDRESS = 1 << 10  # 1024
    DATE_OF_BIRTH = 7 << 6  # 64 | 128 | 256 = 448
    GENDER = 1 << 4  # 16
    TELEPHONE = 1 << 2  # 4
    EMAIL = 1 << 1  # 2


@dataclass(frozen=True)
class ClientIdentity:
    """
    Everything a merchant needs to talk to one acquirer.

    Read-only once configured; safe to share between clients and threads.
    """
    merchant_id: str
    sub_id: str
    return_url: str
    private_key: RSAPrivateKey
    certificate: x509.Certificate
    acquirer_certificate: x509.Certificate

    @property
    def key_name(self) -> str:
        """Upper-case hex SHA-1 thumbprint of the merchant certificate"""
        return certificate_thumbprint(self.certificate)


def certificate_thumbprint(certificate: x509.Certificate) -> str:
    return certificate.fingerprint(hashes.SHA1()).hex().upper()


@dataclass
class Issuer:
    """A single issuer (bank), as returned in a directory request"""
    issuer_id: str  # BIC
    issuer_name: str  # Human-readable name


@dataclass
class Directory:
    """
    The directory listing, as returned from a directory request.

    Maps a country name to the issuers in that country, in response order.
    """
    issuers: dict[str, list[Issuer]] = field(default_factory=dict)
    acquirer_id: Optional[str] = None
    directory_timestamp: Optional[str] = None

    def add(self, country: str, issuer: Issuer) -> None:
        self.issuers.setdefault(country, []).append(issuer)

    @property
    def countries(self) -> list[str]:
        return list(self.issuers)


@dataclass
class IDealTransactionStatus:
    """
    Result of an iDEAL status request.

    Fields besides status are only set when status is SUCCESS.
    """
    status: TransactionStatus
    consumer_name: Optional[str] = None  # may name one or several consumers
    consumer_iban: Optional[str] = None
    consumer_bic: Optional[str] = None
    amount: Optional[str] = None  # for example, "1.00"
    currency: Optional[str] = None  # for example, "EUR"


@dataclass
class IDINTransactionStatus:
    """
    Result of an iDIN status request.

    Attributes are only present after a successful transaction.
    """
    status: TransactionStatus
    attributes: Optional[dict[str, str]] = None
