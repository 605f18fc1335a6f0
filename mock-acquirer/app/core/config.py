"""Mock Acquirer Configuration"""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings


class AcquirerSettings(BaseSettings):
    """Mock acquirer settings loaded from environment"""

    # Application
    app_name: str = "Mock Acquirer"
    debug: bool = True
    host: str = "0.0.0.0"
    port: int = 8002

    # Public address, used in issuerAuthenticationURL
    public_url: str = "http://localhost:8002"
    acquirer_id: str = "0050"

    # Only requests from this merchant are accepted when set
    merchant_id: Optional[str] = None

    # Acquirer signing material
    private_key_path: str = "../config/keys/acquirer_private.pem"
    certificate_path: str = "../config/keys/acquirer_certificate.pem"

    # Merchant certificate to verify requests and encrypt iDIN attributes
    merchant_certificate_path: str = "../config/keys/merchant_certificate.pem"

    class Config:
        env_prefix = "MOCK_ACQUIRER_"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> AcquirerSettings:
    """Get cached settings instance"""
    return AcquirerSettings()
