# iDEAL/iDIN client
# Signed merchant-acquirer messages for Dutch bank payments and identification

from .client import CommonClient, IDealClient, IDINClient, Transaction
from .config import Settings, get_settings
from .errors import (
    AcquirerError,
    ConfigurationError,
    DecryptionError,
    IdxError,
    InvalidStatusError,
    RequestValidationError,
    ResponseFormatError,
    SignatureValidationError,
    SigningError,
    TransactionIDMismatchError,
    TransactionStateError,
    TransportError,
)
from .messages import IDealMessageBuilder, IDINMessageBuilder
from .models import (
    ClientIdentity,
    Directory,
    IDealTransactionStatus,
    IDINAttribute,
    IDINTransactionStatus,
    Issuer,
    TransactionState,
    TransactionStatus,
)
from .signer import MessageSigner
from .transport import HTTPTransport
from .verifier import MessageVerifier
from .xmlenc import AttributeDecryptor

__all__ = [
    "CommonClient",
    "IDealClient",
    "IDINClient",
    "Transaction",
    "Settings",
    "get_settings",
    "AcquirerError",
    "ConfigurationError",
    "DecryptionError",
    "IdxError",
    "InvalidStatusError",
    "RequestValidationError",
    "ResponseFormatError",
    "SignatureValidationError",
    "SigningError",
    "TransactionIDMismatchError",
    "TransactionStateError",
    "TransportError",
    "IDealMessageBuilder",
    "IDINMessageBuilder",
    "ClientIdentity",
    "Directory",
    "IDealTransactionStatus",
    "IDINAttribute",
    "IDINTransactionStatus",
    "Issuer",
    "TransactionState",
    "TransactionStatus",
    "MessageSigner",
    "HTTPTransport",
    "MessageVerifier",
    "AttributeDecryptor",
]
