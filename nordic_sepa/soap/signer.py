import base64
import logging
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives.asymmetric import rsa
from lxml import etree
from lxml.etree import QName
from zeep import ns

from ..errors import SigningError
from ..utils_crypto import (
    cert_der_b64,
    key_matches_certificate,
    load_certificate,
    load_private_key,
    sign_sha1,
)
from .canonical import EXC_C14N, canonicalize
from .envelope import find_security, find_signature

logger = logging.getLogger(__name__)


class EnvelopeSigner:
    """Signs a rendered envelope whose DigestValues are already filled."""

    def __init__(self, private_key: rsa.RSAPrivateKey, certificate: x509.Certificate):
        if not key_matches_certificate(private_key, certificate):
            raise SigningError("Private key does not belong to the signing certificate")
        self._private_key = private_key
        self.certificate = certificate
        self.cert_b64 = cert_der_b64(certificate)

    @classmethod
    def from_files(
        cls,
        key_path: Path | str,
        cert_path: Path | str,
        password: Optional[bytes] = None,
    ) -> "EnvelopeSigner":
        certificate = load_certificate(cert_path)
        private_key = load_private_key(key_path, password=password)
        return cls(private_key, certificate)

    def sign(self, envelope: etree._Element) -> None:
        security = find_security(envelope)
        signature = find_signature(envelope)
        if security is None or signature is None:
            raise SigningError("Envelope has no WS-Security Signature block")
        signed_info = signature.find(QName(ns.DS, "SignedInfo"))
        if signed_info is None:
            raise SigningError("Signature has no SignedInfo")
        for digest_value in signed_info.iter(QName(ns.DS, "DigestValue")):
            if not digest_value.text:
                raise SigningError("SignedInfo still has an empty DigestValue")

        bst = security.find(QName(ns.WSSE, "BinarySecurityToken"))
        if bst is None:
            raise SigningError("Security header has no BinarySecurityToken")
        bst.text = self.cert_b64

        si_c14n = canonicalize(signed_info, EXC_C14N)
        try:
            sig_bytes = sign_sha1(self._private_key, si_c14n)
        except (ValueError, TypeError, UnsupportedAlgorithm) as exc:
            raise SigningError("RSA-SHA1 signing of SignedInfo failed") from exc
        signature.find(QName(ns.DS, "SignatureValue")).text = base64.b64encode(sig_bytes).decode(
            "ascii"
        )
        logger.debug("Signed SignedInfo (%d canonical bytes)", len(si_c14n))
