"""iDEAL/iDIN client exceptions"""

from typing import Optional


class IdxError(Exception):
    """Base exception for iDEAL/iDIN client errors"""
    pass


class ConfigurationError(IdxError):
    """Settings or trust material are missing or cannot be loaded"""
    pass


class RequestValidationError(IdxError):
    """A request was refused locally and never sent"""
    pass


class TransportError(IdxError):
    """Connection failures and non-200 HTTP responses"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SigningError(IdxError):
    """The outgoing message could not be signed"""
    pass


class ResponseFormatError(IdxError):
    """The response is not XML or misses a required element"""
    pass


class SignatureValidationError(IdxError):
    """The response signature does not verify against the acquirer certificate"""
    pass


class TransactionIDMismatchError(IdxError):
    """The acquirer answered for a different transaction than requested"""

    def __init__(self, expected: str, received: str):
        super().__init__(
            f"returned transaction ID does not match: expected {expected!r}, got {received!r}"
        )
        self.expected = expected
        self.received = received


class InvalidStatusError(IdxError):
    """The response carries a status outside the protocol vocabulary"""

    def __init__(self, status: str):
        super().__init__(f"invalid status: {status!r}")
        self.status = status


class DecryptionError(IdxError):
    """An encrypted attribute could not be decrypted"""
    pass


class TransactionStateError(IdxError):
    """A transaction handle was used out of lifecycle order"""
    pass


class AcquirerError(IdxError):
    """
    Error envelope returned by an iDEAL/iDIN acquirer.

    Only consumer_message may be shown to the consumer; the other fields
    are meant for logs and support.
    """

    def __init__(
        self,
        error_code: str,
        error_message: str,
        error_detail: str,
        consumer_message: str,
    ):
        super().__init__(f"{error_code}: {error_message} ({error_detail})")
        self.error_code = error_code
        self.error_message = error_message
        self.error_detail = error_detail
        self.consumer_message = consumer_message
