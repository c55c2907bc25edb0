"""Body payloads for the bxd corporate file service.

Every request Body carries ``cor:<operation>in`` with a ``mod:RequestHeader``
and an ``ApplicationRequest``. Field order inside ApplicationRequest follows
the bank-published ApplicationRequest schema.
"""
import datetime as _dt
import uuid
from typing import Optional

from lxml import etree
from lxml.etree import QName

from .config import DEFAULT_LANGUAGE, RequestParams

COR_NS = "http://bxd.fi/CorporateFileService"
MOD_NS = "http://model.bxd.fi"
BXD_NS = "http://bxd.fi/xmldata/"

SOFTWARE_ID = "nordic-sepa"

# command -> (operation element, ApplicationRequest Command value)
OPERATIONS = {
    "get_user_info": ("getUserInfoin", "GetUserInfo"),
    "download_file_list": ("downloadFileListin", "DownloadFileList"),
    "download_file": ("downloadFilein", "DownloadFile"),
    "upload_file": ("uploadFilein", "UploadFile"),
}


def new_request_id() -> str:
    return uuid.uuid4().hex


def format_timestamp(moment: _dt.datetime) -> str:
    """ISO-8601 with an explicit UTC offset, e.g. ``2024-05-01T10:00:00.000001+00:00``."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=_dt.timezone.utc)
    return moment.astimezone(_dt.timezone.utc).isoformat(timespec="microseconds")


def _add(parent: etree._Element, ns: str, tag: str, text: Optional[str]) -> Optional[etree._Element]:
    if text is None or str(text).strip() == "":
        return None
    el = etree.SubElement(parent, QName(ns, tag))
    el.text = str(text)
    return el


def _user_agent() -> str:
    from . import __version__
    return f"{SOFTWARE_ID}/{__version__}"


def render_request_header(
    params: RequestParams,
    receiver_id: str,
    now: _dt.datetime,
    request_id: str,
) -> etree._Element:
    header = etree.Element(QName(MOD_NS, "RequestHeader"), nsmap={"mod": MOD_NS})
    _add(header, MOD_NS, "SenderId", params.customer_id)
    _add(header, MOD_NS, "RequestId", request_id)
    _add(header, MOD_NS, "Timestamp", format_timestamp(now))
    _add(header, MOD_NS, "Language", (params.language or DEFAULT_LANGUAGE).upper())
    _add(header, MOD_NS, "UserAgent", _user_agent())
    _add(header, MOD_NS, "ReceiverId", receiver_id)
    return header


def render_application_request(params: RequestParams, now: _dt.datetime) -> etree._Element:
    """Inline ApplicationRequest; ``content`` is copied as-is."""
    _operation, command_name = OPERATIONS[params.command]
    app = etree.Element(QName(BXD_NS, "ApplicationRequest"), nsmap={None: BXD_NS})
    _add(app, BXD_NS, "CustomerId", params.customer_id)
    _add(app, BXD_NS, "Command", command_name)
    _add(app, BXD_NS, "Timestamp", format_timestamp(now))
    if params.command in ("download_file_list", "download_file"):
        _add(app, BXD_NS, "Status", (params.status or "").upper() or None)
    _add(app, BXD_NS, "Environment", (params.environment or "").upper())
    if params.command == "download_file" and params.file_reference:
        refs = etree.SubElement(app, QName(BXD_NS, "FileReferences"))
        _add(refs, BXD_NS, "FileReference", params.file_reference)
    _add(app, BXD_NS, "TargetId", params.target_id)
    _add(app, BXD_NS, "SoftwareId", SOFTWARE_ID)
    if params.command != "get_user_info":
        _add(app, BXD_NS, "FileType", params.file_type)
    if params.command == "upload_file":
        _add(app, BXD_NS, "Content", params.content)
    return app


def render_operation(
    params: RequestParams,
    receiver_id: str,
    now: _dt.datetime,
    request_id: str,
    application_request: etree._Element,
) -> etree._Element:
    operation, _command_name = OPERATIONS[params.command]
    op = etree.Element(QName(COR_NS, operation), nsmap={"cor": COR_NS})
    op.append(render_request_header(params, receiver_id, now, request_id))
    op.append(application_request)
    return op
