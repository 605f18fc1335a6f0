"""Shared fixtures: throwaway RSA keys, self-signed certificates and identities."""

from datetime import datetime, timezone

import pytest

from idx import ClientIdentity, MessageSigner
from idx_helpers import MERCHANT_ID, RETURN_URL, make_key_pair


@pytest.fixture(scope="session")
def merchant_keys():
    return make_key_pair("merchant.example.nl")


@pytest.fixture(scope="session")
def acquirer_keys():
    return make_key_pair("acquirer.example.nl")


@pytest.fixture(scope="session")
def stranger_keys():
    return make_key_pair("stranger.example.nl")


@pytest.fixture(scope="session")
def identity(merchant_keys, acquirer_keys) -> ClientIdentity:
    merchant_key, merchant_certificate = merchant_keys
    _, acquirer_certificate = acquirer_keys
    return ClientIdentity(
        merchant_id=MERCHANT_ID,
        sub_id="0",
        return_url=RETURN_URL,
        private_key=merchant_key,
        certificate=merchant_certificate,
        acquirer_certificate=acquirer_certificate,
    )


@pytest.fixture(scope="session")
def acquirer_signer(acquirer_keys) -> MessageSigner:
    return MessageSigner(*acquirer_keys)


@pytest.fixture
def fixed_clock():
    return lambda: datetime(2024, 3, 1, 12, 30, 45, 123456, tzinfo=timezone.utc)
