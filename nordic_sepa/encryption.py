import base64
import logging
import os
from typing import Optional

from cryptography import x509
from lxml import etree
from lxml.etree import QName
from zeep import ns

from .errors import EncryptionError
from .utils_crypto import (
    cert_der_b64,
    encrypt_key_for_recipient,
    encrypt_payload_aes_cbc_pkcs5,
    generate_symmetric_key,
    thumbprint_sha1_b64,
)

logger = logging.getLogger(__name__)

XENC_NS = "http://www.w3.org/2001/04/xmlenc#"
XENC_ELEMENT = XENC_NS + "Element"
XENC_AES256_CBC = XENC_NS + "aes256-cbc"
XENC_RSA_1_5 = XENC_NS + "rsa-1_5"


def encrypt_element(
    element: etree._Element,
    certificate: x509.Certificate,
    *,
    key_bytes: Optional[bytes] = None,
    iv_bytes: Optional[bytes] = None,
) -> etree._Element:
    """Encrypt ``element`` for the holder of ``certificate``.

    Returns an ``xenc:EncryptedData`` element (Type=Element). The session key
    is RSA PKCS#1 v1.5 wrapped under the certificate's public key and the
    CipherValue is ``IV || AES-256-CBC(ciphertext)``.
    The recipient is named by its certificate and by the certificate SHA-1
    thumbprint in ``dsig:KeyName``. The caller replaces the plaintext element
    with the result.
    """
    key = key_bytes or generate_symmetric_key(32)
    iv = iv_bytes or os.urandom(16)
    plaintext = etree.tostring(element, encoding="UTF-8", xml_declaration=False)
    try:
        ciphertext = encrypt_payload_aes_cbc_pkcs5(key, iv, plaintext)
        wrapped_key_b64 = encrypt_key_for_recipient(certificate, key)
    except (ValueError, TypeError, AttributeError) as exc:
        raise EncryptionError("Could not encrypt application request") from exc

    enc_data = etree.Element(
        QName(XENC_NS, "EncryptedData"),
        {"Type": XENC_ELEMENT},
        nsmap={"xenc": XENC_NS, "dsig": ns.DS},
    )
    etree.SubElement(enc_data, QName(XENC_NS, "EncryptionMethod"), Algorithm=XENC_AES256_CBC)

    key_info = etree.SubElement(enc_data, QName(ns.DS, "KeyInfo"))
    enc_key = etree.SubElement(key_info, QName(XENC_NS, "EncryptedKey"))
    etree.SubElement(enc_key, QName(XENC_NS, "EncryptionMethod"), Algorithm=XENC_RSA_1_5)
    cert_info = etree.SubElement(enc_key, QName(ns.DS, "KeyInfo"))
    etree.SubElement(cert_info, QName(ns.DS, "KeyName")).text = thumbprint_sha1_b64(certificate)
    x509_data = etree.SubElement(cert_info, QName(ns.DS, "X509Data"))
    etree.SubElement(x509_data, QName(ns.DS, "X509Certificate")).text = cert_der_b64(certificate)
    key_cipher = etree.SubElement(enc_key, QName(XENC_NS, "CipherData"))
    etree.SubElement(key_cipher, QName(XENC_NS, "CipherValue")).text = wrapped_key_b64

    cipher_data = etree.SubElement(enc_data, QName(XENC_NS, "CipherData"))
    etree.SubElement(cipher_data, QName(XENC_NS, "CipherValue")).text = base64.b64encode(
        iv + ciphertext
    ).decode("ascii")
    logger.debug("Encrypted %s (%d bytes)", QName(element).localname, len(plaintext))
    return enc_data
