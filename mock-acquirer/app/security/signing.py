"""
Message security for mock acquirer

Verifies merchant request signatures and signs acquirer responses with the
same engine the merchant client uses.
"""

import logging
from dataclasses import dataclass

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey, RSAPublicKey
from lxml import etree

from idx import MessageSigner, MessageVerifier

from ..core.config import AcquirerSettings

logger = logging.getLogger(__name__)


@dataclass
class AcquirerSecurity:
    """Acquirer key material plus the one merchant certificate it trusts"""
    private_key: RSAPrivateKey
    certificate: x509.Certificate
    merchant_certificate: x509.Certificate

    def __post_init__(self):
        self._signer = MessageSigner(self.private_key, self.certificate)
        self._verifier = MessageVerifier(self.merchant_certificate)

    @classmethod
    def from_settings(cls, settings: AcquirerSettings) -> "AcquirerSecurity":
        """Load key material from the configured PEM files"""
        with open(settings.private_key_path, "rb") as f:
            private_key = serialization.load_pem_private_key(f.read(), password=None)
        with open(settings.certificate_path, "rb") as f:
            certificate = x509.load_pem_x509_certificate(f.read())
        with open(settings.merchant_certificate_path, "rb") as f:
            merchant_certificate = x509.load_pem_x509_certificate(f.read())
        logger.info(f"Loaded acquirer certificate {certificate.subject.rfc4514_string()}")
        return cls(private_key, certificate, merchant_certificate)

    @property
    def merchant_public_key(self) -> RSAPublicKey:
        return self.merchant_certificate.public_key()

    def verify_request(self, body: bytes) -> etree._Element:
        """Verify a merchant request, raising SignatureValidationError"""
        return self._verifier.verify(body)

    def sign_response(self, response: etree._Element) -> bytes:
        return self._signer.sign(response)
