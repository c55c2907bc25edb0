"""Signed WS-Security SOAP requests for Nordic bank file services."""
from importlib.metadata import version as _v, PackageNotFoundError
try:
    __version__ = _v("nordic-sepa")
except PackageNotFoundError:
    __version__ = "0.0.0+editable"

from .config import RequestParams
from .errors import (
    CanonicalizationError,
    CertificateError,
    EncryptionError,
    InvalidParameter,
    MissingParameter,
    PrivateKeyError,
    SchemaValidationError,
    SepaError,
    SigningError,
    UnsupportedCommand,
)
from .soap.builder import SoapBuilder, build_request
from .validation import ValidationResult, check_params

__all__ = [
    "RequestParams",
    "SoapBuilder",
    "build_request",
    "check_params",
    "ValidationResult",
    # errors
    "SepaError",
    "MissingParameter",
    "InvalidParameter",
    "UnsupportedCommand",
    "CertificateError",
    "PrivateKeyError",
    "SigningError",
    "CanonicalizationError",
    "EncryptionError",
    "SchemaValidationError",
]
