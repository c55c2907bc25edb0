"""Parameter checks run before any XML or crypto work."""
import base64
import binascii
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from .commands import BANKS, lookup
from .config import ENVIRONMENTS, RequestParams
from .errors import InvalidParameter, MissingParameter, SepaError


@dataclass(frozen=True)
class ValidationResult:
    missing: Optional[str] = None
    invalid: Optional[Tuple[str, str]] = None
    error: Optional[SepaError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        if self.error is not None:
            raise self.error


def _is_absent(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    return False


def _missing(field: str) -> ValidationResult:
    return ValidationResult(missing=field, error=MissingParameter(field))


def _invalid(field: str, reason: str) -> ValidationResult:
    return ValidationResult(invalid=(field, reason), error=InvalidParameter(field, reason))


def _check_values(params: RequestParams) -> ValidationResult:
    if str(params.environment).strip().upper() not in ENVIRONMENTS:
        return _invalid("environment", f"expected one of {', '.join(ENVIRONMENTS)}")
    if params.content is not None:
        if not isinstance(params.content, str):
            return _invalid("content", "expected base64 text")
        try:
            base64.b64decode("".join(params.content.split()), validate=True)
        except (binascii.Error, ValueError):
            return _invalid("content", "not base64 encoded")
    if not isinstance(params.encrypt, bool):
        return _invalid("encrypt", "expected true/false, yes/no or 1/0")
    if params.encrypt and not BANKS[params.bank].supports_encryption:
        return _invalid("encrypt", f"request encryption is not available for {params.bank}")
    return ValidationResult()


def check_params(params: RequestParams) -> ValidationResult:
    """Check ``params`` against the required-field set of its bank/command.

    Returns the first missing field in declaration order, or the first
    invalid value. ``UnsupportedCommand`` is reported through ``error``.
    """
    for field in ("bank", "command"):
        if _is_absent(params.get(field)):
            return _missing(field)
    try:
        spec = lookup(params.bank, params.command)
    except SepaError as exc:
        return ValidationResult(error=exc)
    for field in spec.required:
        if _is_absent(params.get(field)):
            return _missing(field)
    return _check_values(params)


def validate(params: RequestParams) -> None:
    check_params(params).raise_for_error()
