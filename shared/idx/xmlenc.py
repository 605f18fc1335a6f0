"""
iDIN Attribute Decryptor

Decrypts the XML-Encryption protected SAML attributes of a successful iDIN
status response with the merchant's private key. The content key is
transported with RSA (OAEP or PKCS#1 v1.5); the attribute itself is
encrypted with AES-CBC or AES-GCM.
"""

import base64
import binascii
import logging
from xml.sax.saxutils import quoteattr

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPrivateKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from lxml import etree

from .errors import DecryptionError

logger = logging.getLogger(__name__)

XENC_NS = "http://www.w3.org/2001/04/xmlenc#"
XENC11_NS = "http://www.w3.org/2009/xmlenc11#"
DS_NS = "http://www.w3.org/2000/09/xmldsig#"

RSA_OAEP_MGF1P = XENC_NS + "rsa-oaep-mgf1p"
RSA_OAEP = XENC11_NS + "rsa-oaep"
RSA_1_5 = XENC_NS + "rsa-1_5"

AES_CBC = {
    XENC_NS + "aes128-cbc": 16,
    XENC_NS + "aes192-cbc": 24,
    XENC_NS + "aes256-cbc": 32,
}
AES_GCM = {
    XENC11_NS + "aes128-gcm": 16,
    XENC11_NS + "aes192-gcm": 24,
    XENC11_NS + "aes256-gcm": 32,
}

DIGESTS = {
    "http://www.w3.org/2000/09/xmldsig#sha1": hashes.SHA1,
    "http://www.w3.org/2001/04/xmlenc#sha256": hashes.SHA256,
    "http://www.w3.org/2001/04/xmldsig-more#sha384": hashes.SHA384,
    "http://www.w3.org/2001/04/xmlenc#sha512": hashes.SHA512,
}
MGFS = {
    XENC11_NS + "mgf1sha1": hashes.SHA1,
    XENC11_NS + "mgf1sha256": hashes.SHA256,
    XENC11_NS + "mgf1sha384": hashes.SHA384,
    XENC11_NS + "mgf1sha512": hashes.SHA512,
}

ATTRIBUTE_PATH = (
    "{*}Transaction/{*}container/{*}Response/{*}Assertion"
    "/{*}AttributeStatement/{*}EncryptedAttribute"
)


def _cipher_value(element: etree._Element) -> bytes:
    value = element.findtext(f"{{{XENC_NS}}}CipherData/{{{XENC_NS}}}CipherValue")
    if value is None:
        raise DecryptionError(f"No CipherValue in {etree.QName(element).localname}")
    try:
        return base64.b64decode("".join(value.split()), validate=True)
    except binascii.Error as e:
        raise DecryptionError(f"CipherValue is not base64: {e}") from e


def _algorithm(element: etree._Element) -> etree._Element:
    method = element.find(f"{{{XENC_NS}}}EncryptionMethod")
    if method is None or not method.get("Algorithm"):
        raise DecryptionError(f"No EncryptionMethod in {etree.QName(element).localname}")
    return method


class AttributeDecryptor:
    """
    Decrypts encrypted SAML attributes.

    Usage:
        decryptor = AttributeDecryptor(identity.private_key)
        attributes = decryptor.decrypt_attributes(status_response)
    """

    def __init__(self, private_key: RSAPrivateKey):
        self._private_key = private_key

    def decrypt_attributes(self, root: etree._Element) -> dict[str, str]:
        """
        Decrypt every EncryptedAttribute of an AcquirerStatusRes.

        Returns:
            Mapping of attribute name to its first value

        Raises:
            DecryptionError: Any attribute fails; no partial result is returned
        """
        attributes = {}
        for encrypted_attribute in root.iterfind(ATTRIBUTE_PATH):
            encrypted_data = encrypted_attribute.find(f"{{{XENC_NS}}}EncryptedData")
            if encrypted_data is None:
                raise DecryptionError("EncryptedAttribute without EncryptedData")
            attribute = self.decrypt_element(encrypted_data)
            if etree.QName(attribute).localname != "Attribute":
                attribute = attribute.find(".//{*}Attribute")
            if attribute is None:
                raise DecryptionError("Decrypted content holds no Attribute")
            name = attribute.get("Name")
            if not name:
                raise DecryptionError("Decrypted Attribute has no Name")
            attributes[name] = attribute.findtext("{*}AttributeValue", default="")
        logger.info(f"Decrypted {len(attributes)} attributes")
        return attributes

    def decrypt_element(self, encrypted_data: etree._Element) -> etree._Element:
        """Decrypt an EncryptedData element of type Element"""
        key = self._content_key(encrypted_data)
        method = _algorithm(encrypted_data).get("Algorithm")
        data = _cipher_value(encrypted_data)
        try:
            plaintext = self._decrypt_data(method, key, data)
        except (ValueError, InvalidTag) as e:
            raise DecryptionError(f"Failed to decrypt attribute: {e}") from e
        return self._parse_fragment(encrypted_data, plaintext)

    def _encrypted_key(self, encrypted_data: etree._Element) -> etree._Element:
        encrypted_key = encrypted_data.find(f"{{{DS_NS}}}KeyInfo/{{{XENC_NS}}}EncryptedKey")
        if encrypted_key is None:
            # SAML allows the key as a sibling inside EncryptedAttribute
            parent = encrypted_data.getparent()
            if parent is not None:
                encrypted_key = parent.find(f"{{{XENC_NS}}}EncryptedKey")
        if encrypted_key is None:
            raise DecryptionError("No EncryptedKey for EncryptedData")
        return encrypted_key

    def _content_key(self, encrypted_data: etree._Element) -> bytes:
        encrypted_key = self._encrypted_key(encrypted_data)
        method = _algorithm(encrypted_key)
        wrapped = _cipher_value(encrypted_key)
        try:
            return self._private_key.decrypt(wrapped, self._key_padding(method))
        except ValueError as e:
            raise DecryptionError(f"Failed to decrypt content key: {e}") from e

    def _key_padding(self, method: etree._Element) -> padding.AsymmetricPadding:
        algorithm = method.get("Algorithm")
        if algorithm == RSA_1_5:
            return padding.PKCS1v15()
        if algorithm not in (RSA_OAEP_MGF1P, RSA_OAEP):
            raise DecryptionError(f"Unsupported key transport algorithm: {algorithm}")

        digest_uri = method.find(f"{{{DS_NS}}}DigestMethod")
        digest = hashes.SHA1
        if digest_uri is not None:
            digest = DIGESTS.get(digest_uri.get("Algorithm"))
            if digest is None:
                raise DecryptionError(f"Unsupported OAEP digest: {digest_uri.get('Algorithm')}")

        mgf_digest = hashes.SHA1
        mgf = method.find(f"{{{XENC11_NS}}}MGF")
        if algorithm == RSA_OAEP and mgf is not None:
            mgf_digest = MGFS.get(mgf.get("Algorithm"))
            if mgf_digest is None:
                raise DecryptionError(f"Unsupported OAEP mask generation: {mgf.get('Algorithm')}")

        return padding.OAEP(mgf=padding.MGF1(algorithm=mgf_digest()), algorithm=digest(), label=None)

    def _decrypt_data(self, method: str, key: bytes, data: bytes) -> bytes:
        if method in AES_CBC:
            self._check_key_size(method, key, AES_CBC[method])
            iv, ciphertext = data[:16], data[16:]
            decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            # XML-Enc padding: the last byte counts the padding bytes
            pad_length = padded[-1] if padded else 0
            if not 1 <= pad_length <= 16:
                raise DecryptionError("Invalid padding in decrypted attribute")
            return padded[:-pad_length]
        if method in AES_GCM:
            self._check_key_size(method, key, AES_GCM[method])
            return AESGCM(key).decrypt(data[:12], data[12:], None)
        raise DecryptionError(f"Unsupported data encryption algorithm: {method}")

    def _check_key_size(self, method: str, key: bytes, size: int) -> None:
        if len(key) != size:
            raise DecryptionError(f"Content key of {len(key)} bytes does not fit {method}")

    def _parse_fragment(self, context: etree._Element, plaintext: bytes) -> etree._Element:
        # The fragment may use prefixes declared on ancestors of EncryptedData
        parent = context.getparent()
        nsmap = parent.nsmap if parent is not None else context.nsmap
        declarations = "".join(
            f" xmlns:{prefix}={quoteattr(uri)}" if prefix else f" xmlns={quoteattr(uri)}"
            for prefix, uri in nsmap.items()
        )
        wrapper = f"<decrypted{declarations}>".encode() + plaintext + b"</decrypted>"
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            fragment = etree.fromstring(wrapper, parser=parser)
        except etree.XMLSyntaxError as e:
            raise DecryptionError(f"Decrypted attribute is not XML: {e}") from e
        if len(fragment) == 0:
            raise DecryptionError("Decrypted attribute is empty")
        return fragment[0]
