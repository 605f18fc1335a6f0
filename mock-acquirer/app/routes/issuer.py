"""Simulated issuer pages for mock acquirer"""

import logging
from html import escape
from urllib.parse import urlencode

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from idx import TransactionStatus

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/issuer", tags=["Issuer"])

OUTCOMES = [status.value for status in TransactionStatus if status != TransactionStatus.OPEN]


@router.get("/{transaction_id}", response_class=HTMLResponse)
async def authenticate(transaction_id: str, request: Request):
    """Page where the consumer picks the outcome of the transaction"""
    transaction = request.app.state.transactions.get_transaction(transaction_id)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    links = "".join(
        f'<li><a href="/issuer/{escape(transaction_id)}/{outcome}">{outcome}</a></li>'
        for outcome in OUTCOMES
    )
    return (
        f"<html><body><h1>{escape(transaction.issuer_id)}</h1>"
        f"<p>Transaction {escape(transaction_id)}</p><ul>{links}</ul></body></html>"
    )


@router.get("/{transaction_id}/{outcome}")
async def complete(transaction_id: str, outcome: str, request: Request):
    """Finish the transaction and send the consumer back to the merchant"""
    if outcome not in OUTCOMES:
        raise HTTPException(status_code=400, detail=f"Unknown outcome {outcome}")

    transaction = request.app.state.transactions.update_status(transaction_id, outcome)
    if not transaction:
        raise HTTPException(status_code=404, detail="Transaction not found")

    logger.info(f"Transaction {transaction_id} completed by consumer: {transaction.status}")
    separator = "&" if "?" in transaction.return_url else "?"
    return RedirectResponse(
        url=f"{transaction.return_url}{separator}" + urlencode({"trxid": transaction_id, "ec": transaction.entrance_code}),
        status_code=303,
    )
