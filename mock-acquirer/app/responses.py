"""
Response documents for mock acquirer

Responses are written in the namespace of the request they answer, with
the same version (and productID) attributes.
"""

from typing import Optional

from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from lxml import etree

from idx.messages import SAML_NS, SAMLP_NS, format_timestamp, utc_now
from idx.interpreter import SAML_STATUS_PREFIX

from .database.issuers import CONSUMER_IBAN, CONSUMER_NAME, ISSUERS, consumer_attributes
from .models.transaction import AcquirerTransaction
from .security.xmlenc import encrypt_attribute

ERROR_MESSAGES = {
    "IX1100": "Received XML not valid",
    "IX1400": "Unknown message",
    "SE2700": "Invalid electronic signature",
    "AP1100": "MerchantID unknown",
    "AP2600": "Transaction does not exist",
    "BR1260": "Unknown entry in list",
    "SO1000": "Failure in system",
}

CONSUMER_MESSAGE = "Betalen met iDEAL is nu niet mogelijk. Probeer het later nogmaals of betaal op een andere manier."


class ResponseBuilder:
    """Builds unsigned acquirer responses mirroring a request root"""

    def __init__(self, namespace: str, attributes: dict[str, str], acquirer_id: str):
        self.namespace = namespace
        self.attributes = attributes
        self.acquirer_id = acquirer_id

    @classmethod
    def for_request(cls, request: etree._Element, acquirer_id: str) -> "ResponseBuilder":
        attributes = {
            name: request.get(name)
            for name in ("version", "productID")
            if request.get(name) is not None
        }
        return cls(etree.QName(request).namespace, attributes, acquirer_id)

    def _tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}"

    def _child(self, parent: etree._Element, name: str, text: Optional[str] = None) -> etree._Element:
        element = etree.SubElement(parent, self._tag(name))
        if text is not None:
            element.text = text
        return element

    def _root(self, tag: str, with_acquirer: bool = True) -> etree._Element:
        root = etree.Element(self._tag(tag), nsmap={None: self.namespace})
        for name, value in self.attributes.items():
            root.set(name, value)
        self._child(root, "createDateTimestamp", format_timestamp(utc_now()))
        if with_acquirer:
            acquirer = self._child(root, "Acquirer")
            self._child(acquirer, "acquirerID", self.acquirer_id)
        return root

    def directory(self) -> etree._Element:
        root = self._root("DirectoryRes")
        directory = self._child(root, "Directory")
        self._child(directory, "directoryDateTimestamp", format_timestamp(utc_now()))
        for country_name, issuers in ISSUERS.items():
            country = self._child(directory, "Country")
            self._child(country, "countryNames", country_name)
            for issuer_id, issuer_name in issuers:
                issuer = self._child(country, "Issuer")
                self._child(issuer, "issuerID", issuer_id)
                self._child(issuer, "issuerName", issuer_name)
        return root

    def transaction_started(self, transaction: AcquirerTransaction, authentication_url: str) -> etree._Element:
        root = self._root("AcquirerTrxRes")
        issuer = self._child(root, "Issuer")
        self._child(issuer, "issuerAuthenticationURL", authentication_url)
        trx = self._child(root, "Transaction")
        self._child(trx, "transactionID", transaction.transaction_id)
        self._child(trx, "transactionCreateDateTimestamp", format_timestamp(transaction.created_at))
        if transaction.purchase_id is not None:
            self._child(trx, "purchaseID", transaction.purchase_id)
        return root

    def ideal_status(self, transaction: AcquirerTransaction) -> etree._Element:
        root = self._root("AcquirerStatusRes")
        trx = self._child(root, "Transaction")
        self._child(trx, "transactionID", transaction.transaction_id)
        self._child(trx, "status", transaction.status)
        self._child(trx, "statusDateTimestamp", format_timestamp(transaction.updated_at))
        if transaction.status == "Success":
            self._child(trx, "consumerName", CONSUMER_NAME)
            self._child(trx, "consumerIBAN", CONSUMER_IBAN)
            self._child(trx, "consumerBIC", transaction.issuer_id)
            self._child(trx, "amount", transaction.amount)
            self._child(trx, "currency", transaction.currency)
        return root

    def idin_status(self, transaction: AcquirerTransaction, merchant_key: RSAPublicKey) -> etree._Element:
        root = self._root("AcquirerStatusRes")
        trx = self._child(root, "Transaction")
        self._child(trx, "transactionID", transaction.transaction_id)
        self._child(trx, "statusDateTimestamp", format_timestamp(transaction.updated_at))
        container = self._child(trx, "container")

        response = etree.SubElement(
            container,
            f"{{{SAMLP_NS}}}Response",
            nsmap={"samlp": SAMLP_NS, "saml": SAML_NS},
        )
        response.set("ID", f"RES-{transaction.transaction_id}")
        response.set("InResponseTo", transaction.request_id or "")
        response.set("Version", "2.0")
        response.set("IssueInstant", format_timestamp(utc_now()))
        status = etree.SubElement(response, f"{{{SAMLP_NS}}}Status")
        status_code = etree.SubElement(status, f"{{{SAMLP_NS}}}StatusCode")
        status_code.set("Value", SAML_STATUS_PREFIX + transaction.status)

        if transaction.status == "Success":
            assertion = etree.SubElement(response, f"{{{SAML_NS}}}Assertion")
            statement = etree.SubElement(assertion, f"{{{SAML_NS}}}AttributeStatement")
            for name, value in consumer_attributes(transaction.attributes).items():
                encrypt_attribute(statement, name, value, merchant_key)
        return root

    def error(self, code: str, detail: str) -> etree._Element:
        root = self._root("AcquirerErrorRes", with_acquirer=False)
        error = self._child(root, "Error")
        self._child(error, "errorCode", code)
        self._child(error, "errorMessage", ERROR_MESSAGES.get(code, "Error"))
        self._child(error, "errorDetail", detail)
        self._child(error, "consumerMessage", CONSUMER_MESSAGE)
        return root
