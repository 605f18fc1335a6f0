"""
End-to-end tests: the merchant client against the mock acquirer app.

The FastAPI TestClient is an httpx.Client, so it is handed to the client
transport directly and every exchange runs through the real routes.
"""

import pytest
from fastapi.testclient import TestClient

from app.core.config import AcquirerSettings
from app.database import TransactionDatabase
from app.main import create_app
from app.models import Protocol
from app.security.signing import AcquirerSecurity
from idx import (
    AcquirerError,
    ClientIdentity,
    HTTPTransport,
    IDealClient,
    IDINAttribute,
    IDINClient,
    TransactionStatus,
)
from idx_helpers import MERCHANT_ID, RETURN_URL

BASE_URL = "http://testserver"
CONSUMER = "urn:nl:bvn:bankid:1.0:consumer."


@pytest.fixture
def http(merchant_keys, acquirer_keys):
    settings = AcquirerSettings(public_url=BASE_URL, merchant_id=MERCHANT_ID)
    security = AcquirerSecurity(
        private_key=acquirer_keys[0],
        certificate=acquirer_keys[1],
        merchant_certificate=merchant_keys[1],
    )
    with TestClient(create_app(settings=settings, security=security)) as client:
        yield client


@pytest.fixture
def ideal(identity, http):
    return IDealClient(f"{BASE_URL}/ideal", identity, transport=HTTPTransport(http_client=http))


@pytest.fixture
def idin(identity, http):
    return IDINClient(f"{BASE_URL}/idin", identity, transport=HTTPTransport(http_client=http))


def _complete(http, transaction, outcome: str):
    """Follow the issuer page as the consumer would"""
    page = http.get(f"/issuer/{transaction.transaction_id}")
    assert page.status_code == 200
    assert outcome in page.text

    response = http.get(f"/issuer/{transaction.transaction_id}/{outcome}", follow_redirects=False)
    assert response.status_code == 303
    return response.headers["location"]


# ---------------------------------------------------------------------------
# iDEAL
# ---------------------------------------------------------------------------


def test_ideal_directory(ideal):
    directory = ideal.directory_request()

    assert directory.countries == ["Nederland", "België/Belgique"]
    assert [i.issuer_id for i in directory.issuers["Nederland"]] == [
        "ABNANL2A",
        "INGBNL2A",
        "RABONL2U",
        "SNSBNL2A",
    ]
    assert directory.acquirer_id == "0050"


def test_ideal_payment_flow(ideal, http):
    transaction = ideal.new_transaction("INGBNL2A", "order-1001", "12.50", "Order 1001", "session42")
    transaction.start()

    assert len(transaction.transaction_id) == 16
    assert transaction.transaction_id.startswith("0050")
    assert transaction.issuer_authentication_url == f"{BASE_URL}/issuer/{transaction.transaction_id}"
    assert transaction.status().status == TransactionStatus.OPEN

    location = _complete(http, transaction, "Success")
    assert location == f"{RETURN_URL}?trxid={transaction.transaction_id}&ec=session42"

    result = transaction.status()
    assert result.status == TransactionStatus.SUCCESS
    assert result.consumer_name == "J. de Vries"
    assert result.consumer_iban == "NL44RABO0123456789"
    assert result.consumer_bic == "INGBNL2A"
    assert result.amount == "12.50"
    assert result.currency == "EUR"


def test_ideal_cancelled_has_no_payload(ideal, http):
    transaction = ideal.new_transaction("RABONL2U", "order-1002", "5.00", "Order 1002", "session43")
    transaction.start()
    _complete(http, transaction, "Cancelled")

    result = transaction.status()

    assert result.status == TransactionStatus.CANCELLED
    assert result.consumer_iban is None


def test_unknown_issuer_is_acquirer_error(ideal):
    transaction = ideal.new_transaction("XXXXNL2A", "order-1003", "5.00", "Order 1003", "session44")

    with pytest.raises(AcquirerError) as exc_info:
        transaction.start()

    assert exc_info.value.error_code == "BR1260"
    assert exc_info.value.consumer_message


def test_unknown_transaction_is_acquirer_error(ideal):
    with pytest.raises(AcquirerError) as exc_info:
        ideal.transaction_status("0050999999999999")

    assert exc_info.value.error_code == "AP2600"


def test_unknown_signing_key_is_acquirer_error(identity, stranger_keys, http):
    stranger = ClientIdentity(
        merchant_id=MERCHANT_ID,
        sub_id="0",
        return_url=RETURN_URL,
        private_key=stranger_keys[0],
        certificate=stranger_keys[1],
        acquirer_certificate=identity.acquirer_certificate,
    )
    client = IDealClient(f"{BASE_URL}/ideal", stranger, transport=HTTPTransport(http_client=http))

    with pytest.raises(AcquirerError) as exc_info:
        client.directory_request()

    assert exc_info.value.error_code == "SE2700"


def test_ideal_message_on_idin_endpoint_is_refused(identity, http):
    client = IDealClient(f"{BASE_URL}/idin", identity, transport=HTTPTransport(http_client=http))

    with pytest.raises(AcquirerError) as exc_info:
        client.directory_request()

    assert exc_info.value.error_code == "IX1400"


# ---------------------------------------------------------------------------
# iDIN
# ---------------------------------------------------------------------------


def test_idin_identification_flow(idin, http):
    transaction = idin.new_transaction(
        "ABNANL2A",
        "session42",
        "REQ-1",
        IDINAttribute.BIN | IDINAttribute.DATE_OF_BIRTH,
    )
    transaction.start()
    _complete(http, transaction, "Success")

    result = transaction.status()

    assert result.status == TransactionStatus.SUCCESS
    assert result.attributes == {
        CONSUMER + "bin": "NL-BIN-0123456789",
        CONSUMER + "dateofbirth": "19800101",
        CONSUMER + "18orolder": "true",
    }


def test_idin_failure_has_no_attributes(idin, http):
    transaction = idin.new_transaction("ABNANL2A", "session42", "REQ-2", IDINAttribute.NAME)
    transaction.start()
    _complete(http, transaction, "Failure")

    result = transaction.status()

    assert result.status == TransactionStatus.FAILURE
    assert result.attributes is None


def test_non_numeric_attribute_index_is_acquirer_error(idin):
    message = idin.builder.transaction_request("ABNANL2A", "session42", "REQ-3", IDINAttribute.NAME)
    authn_request = message.find("{*}Transaction/{*}container/{*}AuthnRequest")
    authn_request.set("AttributeConsumingServiceIndex", "abc")

    with pytest.raises(AcquirerError) as exc_info:
        idin.exchange(message)

    assert exc_info.value.error_code == "IX1100"


def test_ideal_transaction_is_unknown_to_idin(ideal, idin):
    transaction = ideal.new_transaction("INGBNL2A", "order-1004", "1.00", "Order 1004", "session45")
    transaction.start()

    with pytest.raises(AcquirerError) as exc_info:
        idin.transaction_status(transaction.transaction_id)

    assert exc_info.value.error_code == "AP2600"


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


def test_final_status_is_never_changed():
    database = TransactionDatabase("0050")
    transaction = database.create_transaction(
        protocol=Protocol.IDEAL,
        merchant_id=MERCHANT_ID,
        issuer_id="INGBNL2A",
        return_url=RETURN_URL,
        entrance_code="session42",
    )

    database.update_status(transaction.transaction_id, "Success")
    database.update_status(transaction.transaction_id, "Cancelled")

    assert database.get_transaction(transaction.transaction_id).status == "Success"
    assert database.update_status("0050000000000000", "Success") is None
