import datetime as _dt
import logging
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

logger = logging.getLogger(__name__)

# Bank servers reject requests whose Timestamp window exceeds this.
TIMESTAMP_VALIDITY = _dt.timedelta(hours=1)

ENVIRONMENTS = ("PRODUCTION", "TEST")

DEFAULT_LANGUAGE = "EN"

_TRUE_STRINGS = ("1", "true", "yes")
_FALSE_STRINGS = ("0", "false", "no", "")


def _as_flag(value: Any) -> Any:
    """Map config-style flag values onto bool; unknown values are returned as-is."""
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_STRINGS:
        return True
    if text in _FALSE_STRINGS:
        return False
    return value


@dataclass
class RequestParams:
    """Business parameters for a single bank request.

    Args:
        bank: Bank identifier, selects the formatting variant (``nordea``, ``danske``).
        command: Operation, e.g. ``upload_file`` or ``download_file_list``.
        private_key_path: PEM/DER RSA key used to sign the envelope.
        cert_path: Signing certificate, embedded as BinarySecurityToken.
        enc_cert_path: Bank encryption certificate (Danske).
        customer_id: Customer / signer id issued by the bank.
        environment: ``PRODUCTION`` or ``TEST``.
        content: Base64 payload, embedded verbatim in the Body.
        encrypt: Encrypt the ApplicationRequest with ``enc_cert_path``.
        request_id: Fixed RequestId; a random one is generated when unset.
    """

    bank: Optional[str] = None
    command: Optional[str] = None
    private_key_path: Optional[Path | str] = None
    cert_path: Optional[Path | str] = None
    enc_cert_path: Optional[Path | str] = None
    customer_id: Optional[str] = None
    environment: Optional[str] = None
    language: Optional[str] = None
    status: Optional[str] = None
    target_id: Optional[str] = None
    file_type: Optional[str] = None
    file_reference: Optional[str] = None
    content: Optional[str] = None
    encrypt: bool = False
    request_id: Optional[str] = None

    def __post_init__(self):
        if self.bank is not None:
            self.bank = str(self.bank).strip().lower()
        if self.command is not None:
            self.command = str(self.command).strip().lower()
        self.encrypt = _as_flag(self.encrypt)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any]) -> "RequestParams":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in mapping.items():
            name = str(key)
            if name not in known:
                logger.warning("Ignoring unknown request parameter %r", name)
                continue
            kwargs[name] = value
        return cls(**kwargs)

    def get(self, field: str) -> Any:
        return getattr(self, field, None)
