"""Request variants, one per (bank, command) pair.

The table is closed: adding a bank or command means adding a ``CommandSpec``
entry here, with its required fields and Body renderer.
"""
import datetime as _dt
import logging
from dataclasses import dataclass
from typing import Callable, Dict, Tuple

from lxml import etree

from .application_request import render_application_request, render_operation
from .config import RequestParams
from .encryption import encrypt_element
from .errors import UnsupportedCommand
from .utils_crypto import load_certificate

logger = logging.getLogger(__name__)

BASE_FIELDS = (
    "bank",
    "command",
    "customer_id",
    "environment",
    "cert_path",
    "private_key_path",
)

BodyRenderer = Callable[[RequestParams, "BankProfile", _dt.datetime, str], etree._Element]


@dataclass(frozen=True)
class BankProfile:
    name: str
    receiver_id: str
    supports_encryption: bool = False


@dataclass(frozen=True)
class CommandSpec:
    bank: str
    command: str
    required: Tuple[str, ...]
    render_body: BodyRenderer


NORDEA = BankProfile(name="nordea", receiver_id="11111111A1")
DANSKE = BankProfile(name="danske", receiver_id="DABAFIHH", supports_encryption=True)

BANKS: Dict[str, BankProfile] = {p.name: p for p in (NORDEA, DANSKE)}


def _render_plain(params: RequestParams, profile: BankProfile, now: _dt.datetime, request_id: str):
    app = render_application_request(params, now)
    return render_operation(params, profile.receiver_id, now, request_id, app)


def _render_danske(params: RequestParams, profile: BankProfile, now: _dt.datetime, request_id: str):
    # Parsed even when not encrypting so a broken bank certificate fails here.
    enc_cert = load_certificate(params.enc_cert_path)
    app = render_application_request(params, now)
    if params.encrypt:
        app = encrypt_element(app, enc_cert)
    return render_operation(params, profile.receiver_id, now, request_id, app)


def _spec(profile: BankProfile, command: str, extra: Tuple[str, ...], renderer: BodyRenderer) -> CommandSpec:
    return CommandSpec(
        bank=profile.name,
        command=command,
        required=BASE_FIELDS + extra,
        render_body=renderer,
    )


COMMANDS: Dict[Tuple[str, str], CommandSpec] = {
    (s.bank, s.command): s
    for s in (
        _spec(NORDEA, "get_user_info", (), _render_plain),
        _spec(NORDEA, "download_file_list", ("target_id", "file_type", "status"), _render_plain),
        _spec(
            NORDEA,
            "download_file",
            ("target_id", "file_type", "status", "file_reference"),
            _render_plain,
        ),
        _spec(NORDEA, "upload_file", ("target_id", "file_type", "content"), _render_plain),
        _spec(
            DANSKE,
            "download_file_list",
            ("enc_cert_path", "language", "file_type", "status"),
            _render_danske,
        ),
        _spec(
            DANSKE,
            "download_file",
            ("enc_cert_path", "language", "file_type", "file_reference"),
            _render_danske,
        ),
        _spec(
            DANSKE,
            "upload_file",
            ("enc_cert_path", "language", "target_id", "file_type", "content"),
            _render_danske,
        ),
    )
}


def lookup(bank: str, command: str) -> CommandSpec:
    try:
        return COMMANDS[(bank, command)]
    except KeyError:
        raise UnsupportedCommand(bank, command) from None
