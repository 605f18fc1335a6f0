"""Merchant-acquirer endpoints for mock acquirer"""

import logging

from fastapi import APIRouter, Request, Response
from lxml import etree

from idx import IDealMessageBuilder, IDINMessageBuilder
from idx.errors import ResponseFormatError, SignatureValidationError
from idx.interpreter import find_element, find_text
from idx.messages import MessageBuilder

from ..database.issuers import issuer_ids
from ..models.transaction import Protocol
from ..responses import ResponseBuilder

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Acquirer"])

XML_MEDIA_TYPE = "text/xml; charset=utf-8"

BUILDERS: dict[Protocol, type[MessageBuilder]] = {
    Protocol.IDEAL: IDealMessageBuilder,
    Protocol.IDIN: IDINMessageBuilder,
}


class AcquirerFault(Exception):
    """Answered with an AcquirerErrorRes"""

    def __init__(self, code: str, detail: str):
        super().__init__(f"{code}: {detail}")
        self.code = code
        self.detail = detail


@router.post("/ideal")
async def ideal(request: Request):
    """iDEAL merchant-acquirer endpoint"""
    return await _handle(request, Protocol.IDEAL)


@router.post("/idin")
async def idin(request: Request):
    """iDIN merchant-acquirer endpoint"""
    return await _handle(request, Protocol.IDIN)


async def _handle(request: Request, protocol: Protocol) -> Response:
    state = request.app.state
    builder_class = BUILDERS[protocol]
    responses = ResponseBuilder(
        builder_class.namespace,
        dict(builder_class.root_attributes),
        state.settings.acquirer_id,
    )
    body = await request.body()

    try:
        try:
            message = state.security.verify_request(body)
        except ResponseFormatError as e:
            raise AcquirerFault("IX1100", str(e))
        except SignatureValidationError as e:
            raise AcquirerFault("SE2700", str(e))

        if etree.QName(message).namespace != builder_class.namespace:
            raise AcquirerFault("IX1400", f"Message is not a {protocol.value} message")
        responses = ResponseBuilder.for_request(message, state.settings.acquirer_id)
        document = _dispatch(request, protocol, message, responses)
    except AcquirerFault as fault:
        logger.warning(f"Rejected {protocol.value} request: {fault}")
        document = responses.error(fault.code, fault.detail)
    except ResponseFormatError as e:
        logger.warning(f"Rejected {protocol.value} request: {e}")
        document = responses.error("IX1100", str(e))

    return Response(content=state.security.sign_response(document), media_type=XML_MEDIA_TYPE)


def _dispatch(
    request: Request,
    protocol: Protocol,
    message: etree._Element,
    responses: ResponseBuilder,
) -> etree._Element:
    settings = request.app.state.settings
    merchant_id = find_text(message, "Merchant/merchantID")
    if settings.merchant_id and merchant_id != settings.merchant_id:
        raise AcquirerFault("AP1100", f"Unknown merchant {merchant_id}")

    kind = etree.QName(message).localname
    logger.info(f"{protocol.value}: {kind} from merchant {merchant_id}")
    if kind == "DirectoryReq":
        return responses.directory()
    if kind == "AcquirerTrxReq":
        return _start_transaction(request, protocol, message, responses)
    if kind == "AcquirerStatusReq":
        return _transaction_status(request, protocol, message, responses)
    raise AcquirerFault("IX1400", f"Unknown message {kind}")


def _start_transaction(
    request: Request,
    protocol: Protocol,
    message: etree._Element,
    responses: ResponseBuilder,
) -> etree._Element:
    state = request.app.state
    issuer_id = find_text(message, "Issuer/issuerID")
    if issuer_id not in issuer_ids():
        raise AcquirerFault("BR1260", f"Unknown issuer {issuer_id}")

    details = {}
    if protocol == Protocol.IDEAL:
        details = {
            "purchase_id": find_text(message, "Transaction/purchaseID"),
            "amount": find_text(message, "Transaction/amount"),
            "currency": find_text(message, "Transaction/currency"),
        }
    else:
        authn_request = find_element(message, "Transaction/container/AuthnRequest")
        index = authn_request.get("AttributeConsumingServiceIndex", "0")
        try:
            attributes = int(index)
        except ValueError:
            raise AcquirerFault("IX1100", f"Invalid AttributeConsumingServiceIndex {index!r}") from None
        details = {
            "request_id": authn_request.get("ID"),
            "attributes": attributes,
        }

    transaction = state.transactions.create_transaction(
        protocol=protocol,
        merchant_id=find_text(message, "Merchant/merchantID"),
        issuer_id=issuer_id,
        return_url=find_text(message, "Merchant/merchantReturnURL"),
        entrance_code=find_text(message, "Transaction/entranceCode"),
        **details,
    )
    logger.info(f"Transaction {transaction.transaction_id} created at issuer {issuer_id}")
    url = f"{state.settings.public_url.rstrip('/')}/issuer/{transaction.transaction_id}"
    return responses.transaction_started(transaction, url)


def _transaction_status(
    request: Request,
    protocol: Protocol,
    message: etree._Element,
    responses: ResponseBuilder,
) -> etree._Element:
    state = request.app.state
    transaction_id = find_text(message, "Transaction/transactionID")
    transaction = state.transactions.get_transaction(transaction_id)
    if not transaction or transaction.protocol != protocol:
        raise AcquirerFault("AP2600", f"Transaction {transaction_id} does not exist")

    if protocol == Protocol.IDEAL:
        return responses.ideal_status(transaction)
    return responses.idin_status(transaction, state.security.merchant_public_key)
