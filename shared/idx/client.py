"""
iDEAL/iDIN Client

Signs requests, posts them to the acquirer, validates the signed answers
and interprets them. One method call performs at most one exchange.

Note that banks expect merchants to follow certain practices which this
client does not enforce. For example, every transaction must be closed,
even if it is not successful or the consumer closes the browser during the
transaction, and directory requests must not be made on every page view.
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional, Union

from lxml import etree

from .config import Settings
from .errors import TransactionStateError
from .interpreter import (
    PlainStatusDecoder,
    SAMLStatusDecoder,
    check_transaction_id,
    parse_directory,
    parse_ideal_status,
    parse_transaction_start,
)
from .messages import IDealMessageBuilder, IDINMessageBuilder, MessageBuilder
from .models import (
    ClientIdentity,
    Directory,
    IDealTransactionStatus,
    IDINTransactionStatus,
    TransactionState,
    TransactionStatus,
)
from .signer import MessageSigner
from .transport import HTTPTransport
from .verifier import MessageVerifier
from .xmlenc import AttributeDecryptor

logger = logging.getLogger(__name__)


class CommonClient(ABC):
    """
    Functionality shared by the iDEAL and iDIN clients.

    The identity is only read; a client may be shared between threads as
    long as its transport may be.
    """

    builder_class: type[MessageBuilder] = MessageBuilder

    def __init__(
        self,
        base_url: str,
        identity: ClientIdentity,
        transport: Optional[HTTPTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            base_url: The API endpoint, as provided by the bank
            identity: Merchant identity and trust material
            transport: Transport to use; a default HTTPS transport otherwise
        """
        self.base_url = base_url
        self.identity = identity
        self.builder = self.builder_class(identity)
        self._signer = MessageSigner(identity.private_key, identity.certificate)
        self._verifier = MessageVerifier(identity.acquirer_certificate)
        self._transport = transport or HTTPTransport()

    @classmethod
    def from_settings(cls, settings: Settings, base_url: Optional[str] = None):
        """Create a client from environment configuration"""
        base_url = base_url or cls._base_url_from(settings)
        identity = settings.load_identity()
        transport = HTTPTransport(
            timeout=settings.http_timeout,
            client_certificate=settings.tls_client_certificate,
            private_key_password=settings.private_key_password,
        )
        return cls(base_url=base_url, identity=identity, transport=transport)

    @classmethod
    @abstractmethod
    def _base_url_from(cls, settings: Settings) -> str:
        """The endpoint setting of this protocol variant"""

    def close(self) -> None:
        self._transport.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def exchange(self, message: etree._Element) -> etree._Element:
        """Sign message, post it and return the validated response"""
        kind = etree.QName(message).localname
        body = self._signer.sign(message)
        logger.info(f"Sending {kind} to {self.base_url}")
        response = self._transport.post(self.base_url, body)
        return self._verifier.validate(response)

    def directory_request(self) -> Directory:
        """Request the list of issuers, grouped by country"""
        response = self.exchange(self.builder.directory_request())
        directory = parse_directory(response)
        logger.info(f"Directory lists {sum(len(i) for i in directory.issuers.values())} issuers")
        return directory


class Transaction:
    """
    A single iDEAL/iDIN transaction.

    Created by a client's new_transaction(); start() sends it once and
    records the transaction ID and the URL to redirect the consumer to.
    """

    def __init__(self, client: CommonClient, message: etree._Element):
        self._client = client
        self._message = message
        self._transaction_id: Optional[str] = None
        self._issuer_authentication_url: Optional[str] = None

    @property
    def state(self) -> TransactionState:
        if self._transaction_id is None:
            return TransactionState.CREATED
        return TransactionState.STARTED

    @property
    def transaction_id(self) -> Optional[str]:
        """The acquirer's transaction ID, useful for logging and status requests"""
        return self._transaction_id

    @property
    def issuer_authentication_url(self) -> Optional[str]:
        """The URL to redirect the consumer to"""
        return self._issuer_authentication_url

    def start(self) -> None:
        """
        Start the transaction.

        Save the transaction ID right away: it is needed to close the
        transaction later, also when the consumer never returns.
        """
        if self.state != TransactionState.CREATED:
            raise TransactionStateError(f"transaction {self._transaction_id} was already started")
        response = self._client.exchange(self._message)
        transaction_id, url = parse_transaction_start(response)
        self._transaction_id = transaction_id
        self._issuer_authentication_url = url
        logger.info(f"Started transaction {transaction_id}")

    def status(self) -> Union[IDealTransactionStatus, IDINTransactionStatus]:
        """Request the current status of this transaction"""
        if self.state != TransactionState.STARTED:
            raise TransactionStateError("transaction has not been started")
        return self._client.transaction_status(self._transaction_id)


class IDealClient(CommonClient):
    """Client for iDEAL payments"""

    builder_class = IDealMessageBuilder
    status_decoder = PlainStatusDecoder()

    @classmethod
    def _base_url_from(cls, settings: Settings) -> str:
        return settings.require("ideal_base_url")

    def new_transaction(
        self,
        issuer_id: str,
        purchase_id: str,
        amount: str,
        description: str,
        entrance_code: str,
    ) -> Transaction:
        """
        Create a transaction but do not start it.

        Args:
            issuer_id: The bank selected by the consumer
            purchase_id: Unique number for this transaction in the merchant's
                system, shown on the consumer's bank statement
            amount: Amount in euro, for example "1.00"
            description: Text shown on the consumer's bank statement
            entrance_code: Session token to resume the (possibly expired)
                session when the consumer returns
        """
        message = self.builder.transaction_request(
            issuer_id, purchase_id, amount, description, entrance_code
        )
        return Transaction(self, message)

    def transaction_status(self, transaction_id: str) -> IDealTransactionStatus:
        """
        Request the status of a transaction.

        Check the status field of the result: a returned result may still
        be anything other than SUCCESS. There are limits on how often this
        may be called ("collection duty").
        """
        response = self.exchange(self.builder.status_request(transaction_id))
        result = parse_ideal_status(response, transaction_id, self.status_decoder)
        logger.info(f"Transaction {transaction_id} status: {result.status.value}")
        return result


class IDINClient(CommonClient):
    """Client for iDIN identification"""

    builder_class = IDINMessageBuilder
    status_decoder = SAMLStatusDecoder()

    def __init__(
        self,
        base_url: str,
        identity: ClientIdentity,
        transport: Optional[HTTPTransport] = None,
    ):
        super().__init__(base_url, identity, transport)
        self._decryptor = AttributeDecryptor(identity.private_key)

    @classmethod
    def _base_url_from(cls, settings: Settings) -> str:
        return settings.require("idin_base_url")

    def new_transaction(
        self,
        issuer_id: str,
        entrance_code: str,
        request_id: str,
        attributes: int,
    ) -> Transaction:
        """
        Create a transaction but do not start it.

        Args:
            issuer_id: The bank selected by the consumer
            entrance_code: Session token to resume the merchant session
            request_id: Unique ID for the embedded SAML AuthnRequest
            attributes: IDINAttribute flags ORed together
        """
        message = self.builder.transaction_request(
            issuer_id, entrance_code, request_id, attributes
        )
        return Transaction(self, message)

    def transaction_status(self, transaction_id: str) -> IDINTransactionStatus:
        """
        Request the status of a transaction.

        Attributes are decrypted only for a successful transaction. This
        request may only be made once, upon the consumer's return.
        """
        response = self.exchange(self.builder.status_request(transaction_id))
        check_transaction_id(response, transaction_id)
        status = self.status_decoder.decode(response)
        logger.info(f"Transaction {transaction_id} status: {status.value}")

        if status != TransactionStatus.SUCCESS:
            return IDINTransactionStatus(status=status)
        return IDINTransactionStatus(
            status=status,
            attributes=self._decryptor.decrypt_attributes(response),
        )
