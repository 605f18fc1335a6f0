"""
Response Interpreter

Turns validated response documents into directory listings, transaction
identities and transaction statuses. Paths are matched on local names so
the same code reads both the iDEAL and the iDIN namespaces.
"""

import logging
from typing import Optional, Protocol

from lxml import etree

from .errors import InvalidStatusError, ResponseFormatError, TransactionIDMismatchError
from .models import Directory, IDealTransactionStatus, Issuer, TransactionStatus

logger = logging.getLogger(__name__)

SAML_STATUS_PREFIX = "urn:oasis:names:tc:SAML:2.0:status:"


def _path(path: str) -> str:
    return "/".join(f"{{*}}{step}" for step in path.split("/"))


def find_element(root: etree._Element, path: str) -> etree._Element:
    """Find a required element, e.g. find_element(root, "Transaction/status")"""
    element = root.find(_path(path))
    if element is None:
        raise ResponseFormatError(f"Missing element {path} in {etree.QName(root).localname}")
    return element


def find_text(root: etree._Element, path: str) -> str:
    return find_element(root, path).text or ""


def optional_text(root: etree._Element, path: str) -> Optional[str]:
    return root.findtext(_path(path))


def parse_directory(root: etree._Element) -> Directory:
    """
    Read a DirectoryRes.

    Issuers keep response order. A country appearing twice gets the
    issuers of both occurrences.
    """
    directory = Directory(
        acquirer_id=optional_text(root, "Acquirer/acquirerID"),
        directory_timestamp=optional_text(root, "Directory/directoryDateTimestamp"),
    )
    for country in root.iterfind(_path("Directory/Country")):
        country_name = find_text(country, "countryNames")
        for issuer in country.iterfind(_path("Issuer")):
            directory.add(
                country_name,
                Issuer(
                    issuer_id=find_text(issuer, "issuerID"),
                    issuer_name=find_text(issuer, "issuerName"),
                ),
            )
    return directory


def parse_transaction_start(root: etree._Element) -> tuple[str, str]:
    """
    Read an AcquirerTrxRes.

    Returns:
        Tuple of (transaction_id, issuer_authentication_url)
    """
    issuer_authentication_url = find_text(root, "Issuer/issuerAuthenticationURL")
    transaction_id = find_text(root, "Transaction/transactionID")
    return transaction_id, issuer_authentication_url


def check_transaction_id(root: etree._Element, expected: str) -> None:
    """Refuse a status response that answers for another transaction"""
    received = find_text(root, "Transaction/transactionID")
    if received != expected:
        logger.warning(f"Transaction ID mismatch: requested {expected}, received {received}")
        raise TransactionIDMismatchError(expected, received)


class StatusDecoder(Protocol):
    """Reads the five-way status from an AcquirerStatusRes"""

    def decode(self, root: etree._Element) -> TransactionStatus:
        ...


class PlainStatusDecoder:
    """iDEAL: Transaction/status holds the status name"""

    def decode(self, root: etree._Element) -> TransactionStatus:
        value = find_text(root, "Transaction/status")
        try:
            return TransactionStatus(value)
        except ValueError:
            raise InvalidStatusError(value) from None


class SAMLStatusDecoder:
    """iDIN: a SAML StatusCode carries the status as a URI attribute"""

    path = "Transaction/container/Response/Status/StatusCode"

    def decode(self, root: etree._Element) -> TransactionStatus:
        value = find_element(root, self.path).get("Value", "")
        if not value.startswith(SAML_STATUS_PREFIX):
            raise InvalidStatusError(value)
        try:
            return TransactionStatus(value[len(SAML_STATUS_PREFIX):])
        except ValueError:
            raise InvalidStatusError(value) from None


def parse_ideal_status(
    root: etree._Element,
    transaction_id: str,
    decoder: Optional[StatusDecoder] = None,
) -> IDealTransactionStatus:
    """
    Read an iDEAL AcquirerStatusRes.

    The echoed transaction ID is checked before the status is looked at.
    Consumer fields are only read for a successful transaction.
    """
    check_transaction_id(root, transaction_id)
    status = (decoder or PlainStatusDecoder()).decode(root)
    if status != TransactionStatus.SUCCESS:
        return IDealTransactionStatus(status=status)

    return IDealTransactionStatus(
        status=status,
        consumer_name=find_text(root, "Transaction/consumerName"),
        consumer_iban=find_text(root, "Transaction/consumerIBAN"),
        consumer_bic=find_text(root, "Transaction/consumerBIC"),
        amount=find_text(root, "Transaction/amount"),
        currency=find_text(root, "Transaction/currency"),
    )
