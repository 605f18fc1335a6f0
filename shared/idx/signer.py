"""
iDEAL/iDIN Message Signer

Wraps a request in an enveloped XML signature (exclusive C14N, RSA-SHA256)
and replaces the default KeyInfo content with a KeyName holding the
thumbprint of the merchant certificate, as the acquirers require.
"""

import logging

from cryptography import x509
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from lxml import etree
from signxml import (
    CanonicalizationMethod,
    DigestAlgorithm,
    SignatureConstructionMethod,
    SignatureMethod,
    XMLSigner,
    namespaces,
)

from .errors import SigningError
from .models import certificate_thumbprint

logger = logging.getLogger(__name__)

XML_HEADER = b'<?xml version="1.0" encoding="UTF-8"?>\n'
DS_NS = namespaces.ds


class MessageSigner:
    """
    Signs outgoing protocol messages.

    Usage:
        signer = MessageSigner(private_key, certificate)
        body = signer.sign(builder.directory_request())
    """

    def __init__(self, private_key: RSAPrivateKey, certificate: x509.Certificate):
        """
        Args:
            private_key: Merchant signing key
            certificate: Certificate matching private_key
        """
        self._private_key = private_key
        self._certificate_pem = certificate.public_bytes(serialization.Encoding.PEM)
        self.key_name = certificate_thumbprint(certificate)

    def _xml_signer(self) -> XMLSigner:
        signer = XMLSigner(
            method=SignatureConstructionMethod.enveloped,
            signature_algorithm=SignatureMethod.RSA_SHA256,
            digest_algorithm=DigestAlgorithm.SHA256,
            c14n_algorithm=CanonicalizationMethod.EXCLUSIVE_XML_CANONICALIZATION_1_0,
        )
        # Signature elements go in the default namespace, without "ds:"
        signer.namespaces = {None: DS_NS}
        return signer

    def sign_element(self, message: etree._Element) -> etree._Element:
        """Return a signed copy of message"""
        try:
            signed = self._xml_signer().sign(
                message,
                key=self._private_key,
                cert=self._certificate_pem.decode(),
            )
        except Exception as e:
            raise SigningError(f"Failed to sign message: {e}") from e

        # signxml 5 leaves the unprefixed Signature without a namespace in memory
        key_info = signed.find("{*}Signature/{*}KeyInfo")
        if key_info is None:
            raise SigningError("Signed message has no KeyInfo element")
        for child in list(key_info):
            key_info.remove(child)
        key_name = etree.SubElement(key_info, f"{{{DS_NS}}}KeyName")
        key_name.text = self.key_name
        return signed

    def sign(self, message: etree._Element) -> bytes:
        """Sign message and serialize it with an XML declaration"""
        signed = self.sign_element(message)
        body = XML_HEADER + etree.tostring(signed, encoding="UTF-8")
        logger.debug(f"Signed {etree.QName(message).localname} with key {self.key_name}")
        return body
