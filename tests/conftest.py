import base64
import datetime as dt
from datetime import timezone
from pathlib import Path

import pytest
from cryptography import x509
from cryptography.hazmat.primitives import hashes, serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.x509.oid import NameOID


def _self_signed(tmpdir: Path, name: str, common_name: str) -> tuple[Path, Path]:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    subject = issuer = x509.Name(
        [
            x509.NameAttribute(NameOID.COUNTRY_NAME, "FI"),
            x509.NameAttribute(NameOID.ORGANIZATION_NAME, "Test Org"),
            x509.NameAttribute(NameOID.COMMON_NAME, common_name),
        ]
    )
    cert = (
        x509.CertificateBuilder()
        .subject_name(subject)
        .issuer_name(issuer)
        .public_key(key.public_key())
        .serial_number(x509.random_serial_number())
        .not_valid_before(dt.datetime.now(timezone.utc) - dt.timedelta(days=1))
        .not_valid_after(dt.datetime.now(timezone.utc) + dt.timedelta(days=1))
        .sign(key, hashes.SHA256())
    )
    key_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.TraditionalOpenSSL,
        encryption_algorithm=serialization.NoEncryption(),
    )
    cert_pem = cert.public_bytes(serialization.Encoding.PEM)
    key_file = tmpdir / f"{name}_private_key.pem"
    cert_file = tmpdir / f"{name}_cert.pem"
    key_file.write_bytes(key_pem)
    cert_file.write_bytes(cert_pem)
    return key_file, cert_file


@pytest.fixture(scope="session")
def keys_dir(tmp_path_factory) -> Path:
    return tmp_path_factory.mktemp("keys")


@pytest.fixture(scope="session")
def signing_keys(keys_dir) -> tuple[Path, Path]:
    return _self_signed(keys_dir, "signing", "customer.example")


@pytest.fixture(scope="session")
def bank_encryption_keys(keys_dir) -> tuple[Path, Path]:
    return _self_signed(keys_dir, "bank_encryption", "bank.example")


@pytest.fixture
def danske_params(signing_keys, bank_encryption_keys) -> dict:
    key_file, cert_file = signing_keys
    _enc_key, enc_cert = bank_encryption_keys
    return {
        "bank": "danske",
        "private_key_path": str(key_file),
        "command": "upload_file",
        "customer_id": "360817",
        "environment": "TEST",
        "enc_cert_path": str(enc_cert),
        "cert_path": str(cert_file),
        "language": "EN",
        "status": "ALL",
        "target_id": "Danske FI",
        "file_type": "pain.001.001.02",
        # encodebytes keeps the trailing newline a typical encoder emits
        "content": base64.encodebytes(b"kissa").decode("ascii"),
    }


@pytest.fixture
def nordea_params(signing_keys) -> dict:
    key_file, cert_file = signing_keys
    return {
        "bank": "nordea",
        "private_key_path": str(key_file),
        "cert_path": str(cert_file),
        "command": "download_file_list",
        "customer_id": "11111111",
        "environment": "PRODUCTION",
        "status": "NEW",
        "target_id": "11111111A1",
        "file_type": "TITO",
    }


@pytest.fixture
def fixed_clock():
    moment = dt.datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc)
    return lambda: moment
