"""Response interpretation tests: directory, transaction start and both status styles."""

import pytest

from idx import (
    InvalidStatusError,
    ResponseFormatError,
    TransactionIDMismatchError,
    TransactionStatus,
)
from idx.interpreter import (
    PlainStatusDecoder,
    SAMLStatusDecoder,
    parse_directory,
    parse_ideal_status,
    parse_transaction_start,
)
from idx_helpers import IDEAL_NS, IDIN_NS, parse_xml

SAMLP_NS = "urn:oasis:names:tc:SAML:2.0:protocol"


def _ideal_status(transaction_id: str, status: str, payload: str = ""):
    return parse_xml(f"""
        <AcquirerStatusRes xmlns="{IDEAL_NS}" version="3.3.1">
            <createDateTimestamp>2024-03-01T12:30:45Z</createDateTimestamp>
            <Acquirer><acquirerID>0050</acquirerID></Acquirer>
            <Transaction>
                <transactionID>{transaction_id}</transactionID>
                <status>{status}</status>
                <statusDateTimestamp>2024-03-01T12:31:00Z</statusDateTimestamp>
                {payload}
            </Transaction>
        </AcquirerStatusRes>
    """)


def _idin_status(transaction_id: str, value: str):
    return parse_xml(f"""
        <AcquirerStatusRes xmlns="{IDIN_NS}" version="1.0.0" productID="NL:BVN:BankID:1.0">
            <createDateTimestamp>2024-03-01T12:30:45Z</createDateTimestamp>
            <Transaction>
                <transactionID>{transaction_id}</transactionID>
                <container>
                    <samlp:Response xmlns:samlp="{SAMLP_NS}">
                        <samlp:Status>
                            <samlp:StatusCode Value="{value}"/>
                        </samlp:Status>
                    </samlp:Response>
                </container>
            </Transaction>
        </AcquirerStatusRes>
    """)


SUCCESS_PAYLOAD = """
    <consumerName>J. de Vries</consumerName>
    <consumerIBAN>NL44RABO0123456789</consumerIBAN>
    <consumerBIC>RABONL2U</consumerBIC>
    <amount>12.50</amount>
    <currency>EUR</currency>
"""


# ---------------------------------------------------------------------------
# Directory
# ---------------------------------------------------------------------------


def test_directory_keeps_countries_and_order():
    root = parse_xml(f"""
        <DirectoryRes xmlns="{IDEAL_NS}" version="3.3.1">
            <createDateTimestamp>2024-03-01T12:30:45Z</createDateTimestamp>
            <Acquirer><acquirerID>0050</acquirerID></Acquirer>
            <Directory>
                <directoryDateTimestamp>2024-02-01T00:00:00Z</directoryDateTimestamp>
                <Country>
                    <countryNames>Netherlands</countryNames>
                    <Issuer><issuerID>INGBNL2A</issuerID><issuerName>ING</issuerName></Issuer>
                    <Issuer><issuerID>RABONL2U</issuerID><issuerName>Rabobank</issuerName></Issuer>
                </Country>
                <Country>
                    <countryNames>Belgium</countryNames>
                    <Issuer><issuerID>GEBABEBB</issuerID><issuerName>BNP</issuerName></Issuer>
                </Country>
            </Directory>
        </DirectoryRes>
    """)

    directory = parse_directory(root)

    assert directory.countries == ["Netherlands", "Belgium"]
    assert [(i.issuer_id, i.issuer_name) for i in directory.issuers["Netherlands"]] == [
        ("INGBNL2A", "ING"),
        ("RABONL2U", "Rabobank"),
    ]
    assert [(i.issuer_id, i.issuer_name) for i in directory.issuers["Belgium"]] == [
        ("GEBABEBB", "BNP"),
    ]
    assert directory.acquirer_id == "0050"
    assert directory.directory_timestamp == "2024-02-01T00:00:00Z"


def test_directory_appends_repeated_country():
    root = parse_xml(f"""
        <DirectoryRes xmlns="{IDEAL_NS}">
            <Directory>
                <Country>
                    <countryNames>Nederland</countryNames>
                    <Issuer><issuerID>ABNANL2A</issuerID><issuerName>ABN AMRO</issuerName></Issuer>
                </Country>
                <Country>
                    <countryNames>Nederland</countryNames>
                    <Issuer><issuerID>SNSBNL2A</issuerID><issuerName>SNS</issuerName></Issuer>
                </Country>
            </Directory>
        </DirectoryRes>
    """)

    directory = parse_directory(root)

    assert [i.issuer_id for i in directory.issuers["Nederland"]] == ["ABNANL2A", "SNSBNL2A"]


# ---------------------------------------------------------------------------
# Transaction start
# ---------------------------------------------------------------------------


def test_transaction_start_reads_id_and_url():
    root = parse_xml(f"""
        <AcquirerTrxRes xmlns="{IDEAL_NS}">
            <Issuer><issuerAuthenticationURL>https://bank.example/auth?t=1</issuerAuthenticationURL></Issuer>
            <Transaction><transactionID>0050000000000001</transactionID></Transaction>
        </AcquirerTrxRes>
    """)

    assert parse_transaction_start(root) == ("0050000000000001", "https://bank.example/auth?t=1")


def test_transaction_start_without_url_fails():
    root = parse_xml(f"""
        <AcquirerTrxRes xmlns="{IDEAL_NS}">
            <Transaction><transactionID>0050000000000001</transactionID></Transaction>
        </AcquirerTrxRes>
    """)

    with pytest.raises(ResponseFormatError):
        parse_transaction_start(root)


# ---------------------------------------------------------------------------
# iDEAL status
# ---------------------------------------------------------------------------


def test_ideal_success_carries_payload():
    result = parse_ideal_status(_ideal_status("TX1", "Success", SUCCESS_PAYLOAD), "TX1")

    assert result.status == TransactionStatus.SUCCESS
    assert result.consumer_name == "J. de Vries"
    assert result.consumer_iban == "NL44RABO0123456789"
    assert result.consumer_bic == "RABONL2U"
    assert result.amount == "12.50"
    assert result.currency == "EUR"


def test_ideal_open_has_no_payload():
    result = parse_ideal_status(_ideal_status("TX1", "Open", SUCCESS_PAYLOAD), "TX1")

    assert result.status == TransactionStatus.OPEN
    assert not result.status.is_final
    assert result.consumer_name is None
    assert result.consumer_iban is None
    assert result.consumer_bic is None
    assert result.amount is None
    assert result.currency is None


def test_ideal_mismatched_transaction_id_fails_before_status():
    root = _ideal_status("TX2", "Success", SUCCESS_PAYLOAD)

    with pytest.raises(TransactionIDMismatchError) as exc_info:
        parse_ideal_status(root, "TX1")

    assert exc_info.value.expected == "TX1"
    assert exc_info.value.received == "TX2"


@pytest.mark.parametrize("status", ["Pending", "success", ""])
def test_ideal_unknown_status_fails(status):
    with pytest.raises(InvalidStatusError):
        parse_ideal_status(_ideal_status("TX1", status), "TX1")


@pytest.mark.parametrize("status", ["Success", "Cancelled", "Expired", "Failure", "Open"])
def test_plain_decoder_maps_every_status(status):
    assert PlainStatusDecoder().decode(_ideal_status("TX1", status)).value == status


# ---------------------------------------------------------------------------
# iDIN status
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("status", ["Success", "Cancelled", "Expired", "Failure", "Open"])
def test_saml_decoder_maps_every_status(status):
    root = _idin_status("TX1", f"urn:oasis:names:tc:SAML:2.0:status:{status}")

    assert SAMLStatusDecoder().decode(root) == TransactionStatus(status)


@pytest.mark.parametrize(
    "value",
    [
        "urn:oasis:names:tc:SAML:2.0:status:Requester",
        "urn:example:status:Success",
        "Success",
    ],
)
def test_saml_decoder_rejects_unknown_values(value):
    with pytest.raises(InvalidStatusError):
        SAMLStatusDecoder().decode(_idin_status("TX1", value))


def test_saml_decoder_requires_status_code():
    root = parse_xml(f"""
        <AcquirerStatusRes xmlns="{IDIN_NS}">
            <Transaction><transactionID>TX1</transactionID></Transaction>
        </AcquirerStatusRes>
    """)

    with pytest.raises(ResponseFormatError):
        SAMLStatusDecoder().decode(root)
