"""
Canonical Message Builder

Builds the request element trees for the iDEAL and iDIN merchant-acquirer
protocols. Element order inside every block is normative: acquirers reject
requests whose children appear in a different order.
"""

from datetime import datetime, timezone
from typing import Callable, Optional

from lxml import etree

from .errors import RequestValidationError
from .models import ClientIdentity, IDINAttribute

SAMLP_NS = "urn:oasis:names:tc:SAML:2.0:protocol"
SAML_NS = "urn:oasis:names:tc:SAML:2.0:assertion"

DIRECTORY_REQUEST = "DirectoryReq"
TRANSACTION_REQUEST = "AcquirerTrxReq"
STATUS_REQUEST = "AcquirerStatusReq"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format as RFC 3339 in UTC with second precision"""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class MessageBuilder:
    """
    Builds unsigned requests for one protocol variant.

    Subclasses fix the namespace and root attributes. Every call returns a
    fresh tree; trees are never reused between requests.
    """

    namespace: str = ""
    root_attributes: dict[str, str] = {}

    def __init__(
        self,
        identity: ClientIdentity,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Args:
            identity: Merchant identity written into every Merchant block
            clock: Source of the createDateTimestamp, UTC
        """
        self.identity = identity
        self.clock = clock

    def _tag(self, name: str) -> str:
        return f"{{{self.namespace}}}{name}"

    def _child(
        self,
        parent: etree._Element,
        name: str,
        text: Optional[str] = None,
    ) -> etree._Element:
        element = etree.SubElement(parent, self._tag(name))
        if text is not None:
            element.text = text
        return element

    def create_message(self, tag: str) -> etree._Element:
        """Create the root with timestamp and Merchant block"""
        msg = etree.Element(self._tag(tag), nsmap={None: self.namespace})
        for name, value in self.root_attributes.items():
            msg.set(name, value)
        self._child(msg, "createDateTimestamp", format_timestamp(self.clock()))
        merchant = self._child(msg, "Merchant")
        self._child(merchant, "merchantID", self.identity.merchant_id)
        self._child(merchant, "subID", self.identity.sub_id)
        return msg

    def directory_request(self) -> etree._Element:
        return self.create_message(DIRECTORY_REQUEST)

    def status_request(self, transaction_id: str) -> etree._Element:
        if not transaction_id:
            raise RequestValidationError("transaction ID is required for a status request")
        msg = self.create_message(STATUS_REQUEST)
        transaction = self._child(msg, "Transaction")
        self._child(transaction, "transactionID", transaction_id)
        return msg

    def _transaction_message(self, issuer_id: str) -> etree._Element:
        msg = self.create_message(TRANSACTION_REQUEST)
        merchant = msg.find(self._tag("Merchant"))
        self._child(merchant, "merchantReturnURL", self.identity.return_url)
        issuer = self._child(msg, "Issuer")
        self._child(issuer, "issuerID", issuer_id)
        # Issuer must occur before Merchant
        merchant.addprevious(issuer)
        return msg


class IDealMessageBuilder(MessageBuilder):
    """Requests for iDEAL (payments)"""

    namespace = "http://www.idealdesk.com/ideal/messages/mer-acq/3.3.1"
    root_attributes = {"version": "3.3.1"}

    currency = "EUR"
    language = "nl"

    def transaction_request(
        self,
        issuer_id: str,
        purchase_id: str,
        amount: str,
        description: str,
        entrance_code: str,
    ) -> etree._Element:
        """
        Build an AcquirerTrxReq.

        Args:
            issuer_id: BIC of the bank selected by the consumer
            purchase_id: Unique reference in the merchant's system, shown on
                the consumer's bank statement
            amount: Decimal amount in euro, for example "1.00"
            description: Text shown on the consumer's bank statement
            entrance_code: Session token to resume the merchant session when
                the consumer returns
        """
        if not purchase_id:
            raise RequestValidationError("purchase ID is required")
        if not entrance_code:
            raise RequestValidationError("entrance code is required")

        msg = self._transaction_message(issuer_id)
        transaction = self._child(msg, "Transaction")
        self._child(transaction, "purchaseID", purchase_id)
        self._child(transaction, "amount", amount)
        self._child(transaction, "currency", self.currency)
        self._child(transaction, "language", self.language)
        self._child(transaction, "description", description)
        self._child(transaction, "entranceCode", entrance_code)
        return msg


class IDINMessageBuilder(MessageBuilder):
    """Requests for iDIN (identity), embedding a SAML AuthnRequest"""

    namespace = "http://www.betaalvereniging.nl/iDx/messages/Merchant-Acquirer/1.0.0"
    root_attributes = {"version": "1.0.0", "productID": "NL:BVN:BankID:1.0"}

    language = "nl"
    saml_version = "2.0"
    protocol_binding = "nl:bvn:bankid:1.0:protocol:iDx"
    minimum_loa = "nl:bvn:bankid:1.0:loa3"

    def transaction_request(
        self,
        issuer_id: str,
        entrance_code: str,
        request_id: str,
        attributes: int,
    ) -> etree._Element:
        """
        Build an AcquirerTrxReq carrying a SAML AuthnRequest.

        Args:
            issuer_id: BIC of the bank selected by the consumer
            entrance_code: Session token to resume the merchant session
            request_id: Unique ID of the AuthnRequest
            attributes: Bitmask of requested IDINAttribute flags
        """
        if not entrance_code:
            raise RequestValidationError("entrance code is required")
        if not request_id:
            raise RequestValidationError("request ID is required")
        if int(attributes) <= 0:
            raise RequestValidationError("at least one attribute must be requested")
        unknown = int(attributes) & ~_ALL_ATTRIBUTES
        if unknown:
            raise RequestValidationError(f"unknown attribute bits: {unknown}")

        msg = self._transaction_message(issuer_id)
        transaction = self._child(msg, "Transaction")
        self._child(transaction, "language", self.language)
        self._child(transaction, "entranceCode", entrance_code)
        container = self._child(transaction, "container")

        authn_request = etree.SubElement(
            container,
            f"{{{SAMLP_NS}}}AuthnRequest",
            nsmap={"samlp": SAMLP_NS, "saml": SAML_NS},
        )
        authn_request.set("ID", request_id)
        authn_request.set("Version", self.saml_version)
        authn_request.set("IssueInstant", msg.findtext(self._tag("createDateTimestamp")))
        authn_request.set("ProtocolBinding", self.protocol_binding)
        authn_request.set("AssertionConsumerServiceURL", self.identity.return_url)
        authn_request.set("AttributeConsumingServiceIndex", str(int(attributes)))

        saml_issuer = etree.SubElement(authn_request, f"{{{SAML_NS}}}Issuer")
        saml_issuer.text = self.identity.merchant_id
        context = etree.SubElement(authn_request, f"{{{SAMLP_NS}}}RequestedAuthnContext")
        context.set("Comparison", "minimum")
        class_ref = etree.SubElement(context, f"{{{SAML_NS}}}AuthnContextClassRef")
        class_ref.text = self.minimum_loa
        return msg


_ALL_ATTRIBUTES = 0
for _flag in IDINAttribute.__members__.values():
    _ALL_ATTRIBUTES |= int(_flag)
