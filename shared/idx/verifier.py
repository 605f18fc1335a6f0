"""
iDEAL/iDIN Response Verifier

Validates inbound documents against the single pinned acquirer
certificate. Error envelopes are recognised before any signature check,
since some acquirers send them unsigned or signed with another key.
"""

import logging

from cryptography import x509
from cryptography.exceptions import InvalidSignature as InvalidSignatureValue
from cryptography.hazmat.primitives import serialization
from lxml import etree
from signxml import InvalidInput, InvalidSignature, XMLVerifier

from .errors import AcquirerError, ResponseFormatError, SignatureValidationError

logger = logging.getLogger(__name__)

ERROR_RESPONSE = "AcquirerErrorRes"


def parse_document(body: bytes) -> etree._Element:
    """Parse a response body without resolving entities or fetching DTDs"""
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(body, parser=parser)
    except etree.XMLSyntaxError as e:
        raise ResponseFormatError(f"Response is not well-formed XML: {e}") from e
    return root


def local_name(element: etree._Element) -> str:
    return etree.QName(element).localname


def acquirer_error_from(root: etree._Element) -> AcquirerError:
    """Build an AcquirerError from an AcquirerErrorRes document"""
    return AcquirerError(
        error_code=root.findtext("{*}Error/{*}errorCode", default=""),
        error_message=root.findtext("{*}Error/{*}errorMessage", default=""),
        error_detail=root.findtext("{*}Error/{*}errorDetail", default=""),
        consumer_message=root.findtext("{*}Error/{*}consumerMessage", default=""),
    )


class MessageVerifier:
    """
    Verifies signed protocol messages.

    Usage:
        verifier = MessageVerifier(acquirer_certificate)
        response = verifier.validate(body)
    """

    def __init__(self, trusted_certificate: x509.Certificate):
        """
        Args:
            trusted_certificate: The one certificate signatures must verify
                against. No chain building, no revocation checks.
        """
        self._certificate_pem = trusted_certificate.public_bytes(
            serialization.Encoding.PEM
        ).decode()

    def verify(self, body: bytes) -> etree._Element:
        """
        Verify the enveloped signature of body.

        Returns:
            The signed element, without its Signature
        """
        root = parse_document(body)
        try:
            result = XMLVerifier().verify(root, x509_cert=self._certificate_pem)
        except (InvalidSignature, InvalidSignatureValue, InvalidInput) as e:
            logger.warning(f"Signature validation failed for {local_name(root)}: {e}")
            raise SignatureValidationError(f"Signature validation failed: {e}") from e
        return result.signed_xml

    def validate(self, body: bytes) -> etree._Element:
        """
        Validate an acquirer response.

        Raises:
            AcquirerError: The response is an error envelope
            SignatureValidationError: The signature does not verify
        """
        root = parse_document(body)
        if local_name(root) == ERROR_RESPONSE:
            error = acquirer_error_from(root)
            logger.warning(f"Acquirer error {error.error_code}: {error.error_message}")
            raise error
        return self.verify(body)
