"""
Attribute encryption for mock acquirer

Encrypts iDIN SAML attributes for the merchant: AES-256-CBC content with
an RSA-OAEP (MGF1 SHA-1) transported key, the default pair iDIN uses.
"""

import base64
import os

from cryptography.hazmat.primitives import hashes, padding as symmetric_padding
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.rsa import RSAPublicKey
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from lxml import etree

from idx.messages import SAML_NS
from idx.xmlenc import DS_NS, RSA_OAEP_MGF1P, XENC_NS

AES256_CBC = XENC_NS + "aes256-cbc"
ELEMENT_TYPE = XENC_NS + "Element"
SHA1 = "http://www.w3.org/2000/09/xmldsig#sha1"


def _cipher_data(parent: etree._Element, data: bytes) -> None:
    cipher_data = etree.SubElement(parent, f"{{{XENC_NS}}}CipherData")
    cipher_value = etree.SubElement(cipher_data, f"{{{XENC_NS}}}CipherValue")
    cipher_value.text = base64.b64encode(data).decode()


def attribute_element(name: str, value: str) -> etree._Element:
    """A plain saml:Attribute with one value"""
    attribute = etree.Element(f"{{{SAML_NS}}}Attribute", nsmap={"saml": SAML_NS})
    attribute.set("Name", name)
    attribute_value = etree.SubElement(attribute, f"{{{SAML_NS}}}AttributeValue")
    attribute_value.text = value
    return attribute


def encrypt_attribute(
    parent: etree._Element,
    name: str,
    value: str,
    public_key: RSAPublicKey,
) -> etree._Element:
    """Append a saml:EncryptedAttribute for name=value to parent"""
    key = os.urandom(32)
    iv = os.urandom(16)
    plaintext = etree.tostring(attribute_element(name, value))

    padder = symmetric_padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
    ciphertext = iv + encryptor.update(padded) + encryptor.finalize()

    wrapped_key = public_key.encrypt(
        key,
        padding.OAEP(mgf=padding.MGF1(algorithm=hashes.SHA1()), algorithm=hashes.SHA1(), label=None),
    )

    encrypted_attribute = etree.SubElement(parent, f"{{{SAML_NS}}}EncryptedAttribute")
    encrypted_data = etree.SubElement(
        encrypted_attribute,
        f"{{{XENC_NS}}}EncryptedData",
        nsmap={"xenc": XENC_NS, "ds": DS_NS},
    )
    encrypted_data.set("Type", ELEMENT_TYPE)
    method = etree.SubElement(encrypted_data, f"{{{XENC_NS}}}EncryptionMethod")
    method.set("Algorithm", AES256_CBC)

    key_info = etree.SubElement(encrypted_data, f"{{{DS_NS}}}KeyInfo")
    encrypted_key = etree.SubElement(key_info, f"{{{XENC_NS}}}EncryptedKey")
    key_method = etree.SubElement(encrypted_key, f"{{{XENC_NS}}}EncryptionMethod")
    key_method.set("Algorithm", RSA_OAEP_MGF1P)
    digest_method = etree.SubElement(key_method, f"{{{DS_NS}}}DigestMethod")
    digest_method.set("Algorithm", SHA1)
    _cipher_data(encrypted_key, wrapped_key)

    _cipher_data(encrypted_data, ciphertext)
    return encrypted_attribute
