"""iDEAL/iDIN Client Configuration"""

import os
from functools import lru_cache
from typing import Optional

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from pydantic_settings import BaseSettings

from .errors import ConfigurationError
from .models import ClientIdentity


class Settings(BaseSettings):
    """Client settings loaded from environment (IDX_ prefix)"""

    # Acquirer endpoints, as provided by the bank
    ideal_base_url: Optional[str] = None
    idin_base_url: Optional[str] = None

    # Merchant
    merchant_id: str = ""
    sub_id: str = "0"  # "0" if you don't use sub IDs
    return_url: str = ""

    # Trust material, inline PEM or path
    certificate: Optional[str] = None
    certificate_path: Optional[str] = None
    private_key: Optional[str] = None
    private_key_path: Optional[str] = None
    private_key_password: Optional[str] = None
    acquirer_certificate: Optional[str] = None
    acquirer_certificate_path: Optional[str] = None

    http_timeout: float = 30.0

    class Config:
        env_prefix = "IDX_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    def require(self, name: str) -> str:
        value = getattr(self, name)
        if not value:
            raise ConfigurationError(f"IDX_{name.upper()} is not configured")
        return value

    def _read_pem(self, inline: Optional[str], path: Optional[str], name: str) -> bytes:
        """Get PEM material from inline setting or file"""
        if inline:
            return inline.encode()
        if path and os.path.exists(path):
            with open(path, "rb") as f:
                return f.read()
        raise ConfigurationError(f"IDX_{name.upper()} or IDX_{name.upper()}_PATH is required")

    def load_certificate(self) -> x509.Certificate:
        pem = self._read_pem(self.certificate, self.certificate_path, "certificate")
        return _load_certificate(pem, "certificate")

    def load_acquirer_certificate(self) -> x509.Certificate:
        pem = self._read_pem(
            self.acquirer_certificate, self.acquirer_certificate_path, "acquirer_certificate"
        )
        return _load_certificate(pem, "acquirer certificate")

    def load_private_key(self) -> RSAPrivateKey:
        pem = self._read_pem(self.private_key, self.private_key_path, "private_key")
        password = self.private_key_password.encode() if self.private_key_password else None
        try:
            key = serialization.load_pem_private_key(pem, password=password)
        except (ValueError, TypeError) as e:
            raise ConfigurationError(f"Failed to load private key: {e}") from e
        if not isinstance(key, RSAPrivateKey):
            raise ConfigurationError("The merchant private key must be an RSA key")
        return key

    def load_identity(self) -> ClientIdentity:
        """Load the merchant identity and trust material"""
        return ClientIdentity(
            merchant_id=self.require("merchant_id"),
            sub_id=self.sub_id,
            return_url=self.require("return_url"),
            private_key=self.load_private_key(),
            certificate=self.load_certificate(),
            acquirer_certificate=self.load_acquirer_certificate(),
        )

    @property
    def tls_client_certificate(self) -> Optional[tuple[str, str]]:
        """Certificate and key paths for TLS client authentication"""
        if self.certificate_path and self.private_key_path:
            return self.certificate_path, self.private_key_path
        return None


def _load_certificate(pem: bytes, name: str) -> x509.Certificate:
    try:
        return x509.load_pem_x509_certificate(pem)
    except ValueError as e:
        raise ConfigurationError(f"Failed to load {name}: {e}") from e


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    return Settings()
