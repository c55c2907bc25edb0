import base64
import hashlib
import os
from pathlib import Path
from typing import Optional

from cryptography import x509
from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes, serialization, padding as sym_padding
from cryptography.hazmat.primitives.asymmetric import padding as asym_padding, rsa
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .errors import CertificateError, PrivateKeyError

PEM_CERT_MARKER = b"-----BEGIN CERTIFICATE-----"


def _read_file(path: Path | str, error_cls, what: str) -> bytes:
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise error_cls(f"Cannot read {what} file {path}: {exc}", path=str(path)) from exc


def load_certificate(cert_path: Path | str) -> x509.Certificate:
    """Load an X.509 certificate from a PEM or DER file.

    A PEM bundle yields its first certificate.
    """
    data = _read_file(cert_path, CertificateError, "certificate")
    try:
        if PEM_CERT_MARKER in data:
            return x509.load_pem_x509_certificate(data)
        return x509.load_der_x509_certificate(data)
    except ValueError as exc:
        raise CertificateError(
            f"{cert_path} is not a valid X.509 certificate", path=str(cert_path)
        ) from exc


def load_private_key(key_path: Path | str, password: Optional[bytes] = None) -> rsa.RSAPrivateKey:
    data = _read_file(key_path, PrivateKeyError, "private key")
    try:
        if data.lstrip().startswith(b"-----BEGIN"):
            key = serialization.load_pem_private_key(data, password=password)
        else:
            key = serialization.load_der_private_key(data, password=password)
    except (ValueError, TypeError) as exc:
        raise PrivateKeyError(
            f"{key_path} is not a valid private key", path=str(key_path)
        ) from exc
    except UnsupportedAlgorithm as exc:
        raise PrivateKeyError(
            f"{key_path} uses an unsupported key algorithm", path=str(key_path)
        ) from exc
    if not isinstance(key, rsa.RSAPrivateKey):
        raise PrivateKeyError(f"{key_path} does not hold an RSA key", path=str(key_path))
    return key


def cert_der_b64(cert: x509.Certificate) -> str:
    der = cert.public_bytes(serialization.Encoding.DER)
    return base64.b64encode(der).decode("ascii")


def thumbprint_sha1_b64(cert: x509.Certificate) -> str:
    der = cert.public_bytes(serialization.Encoding.DER)
    return base64.b64encode(hashlib.sha1(der).digest()).decode("ascii")


def key_matches_certificate(private_key: rsa.RSAPrivateKey, cert: x509.Certificate) -> bool:
    public_key = cert.public_key()
    if not isinstance(public_key, rsa.RSAPublicKey):
        return False
    return public_key.public_numbers() == private_key.public_key().public_numbers()


def encrypt_key_for_recipient(cert: x509.Certificate, key_bytes: bytes) -> str:
    public_key = cert.public_key()
    encrypted = public_key.encrypt(key_bytes, asym_padding.PKCS1v15())
    return base64.b64encode(encrypted).decode("ascii")


def generate_symmetric_key(length: int = 32) -> bytes:
    return os.urandom(length)


def encrypt_payload_aes_cbc_pkcs5(key: bytes, iv: bytes, plaintext: bytes) -> bytes:
    padder = sym_padding.PKCS7(128).padder()
    padded = padder.update(plaintext) + padder.finalize()
    cipher = Cipher(algorithms.AES(key), modes.CBC(iv))
    encryptor = cipher.encryptor()
    return encryptor.update(padded) + encryptor.finalize()


def sign_sha1(private_key: rsa.RSAPrivateKey, data: bytes) -> bytes:
    return private_key.sign(data, asym_padding.PKCS1v15(), hashes.SHA1())
