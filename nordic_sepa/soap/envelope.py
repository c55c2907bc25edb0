"""WS-Security envelope skeleton.

The skeleton is complete before any digest is computed: later stages only
set text on DigestValue, SignatureValue and BinarySecurityToken.
"""
import datetime as _dt
from typing import Optional

from lxml import etree
from lxml.etree import QName
from zeep import ns

from ..application_request import format_timestamp
from ..config import TIMESTAMP_VALIDITY

SOAP_ENV = ns.SOAP_ENV_11

NSMAP = {
    "env": SOAP_ENV,
    "wsse": ns.WSSE,
    "wsu": ns.WSU,
    "dsig": ns.DS,
}

EXC_C14N_URI = "http://www.w3.org/2001/10/xml-exc-c14n#"
RSA_SHA1_URI = "http://www.w3.org/2000/09/xmldsig#rsa-sha1"
SHA1_URI = "http://www.w3.org/2000/09/xmldsig#sha1"
X509V3_VALUE_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-x509-token-profile-1.0#X509v3"
)
BASE64_ENCODING_TYPE = (
    "http://docs.oasis-open.org/wss/2004/01/oasis-200401-wss-soap-message-security-1.0#Base64Binary"
)

# Referenced by URI fragment from SignedInfo; banks expect these exact values.
BODY_ID = "sdf6sa7d86f87s6df786sd87f6s8fsda"
TIMESTAMP_ID = "dsfg8sdg87dsf678g6dsg6ds7fg"
TOKEN_ID = "SecurityToken"

WSU_ID = QName(ns.WSU, "Id")


def _render_timestamp(security: etree._Element, now: _dt.datetime) -> etree._Element:
    timestamp = etree.SubElement(security, QName(ns.WSU, "Timestamp"), {WSU_ID: TIMESTAMP_ID})
    etree.SubElement(timestamp, QName(ns.WSU, "Created")).text = format_timestamp(now)
    etree.SubElement(timestamp, QName(ns.WSU, "Expires")).text = format_timestamp(
        now + TIMESTAMP_VALIDITY
    )
    return timestamp


def _render_reference(signed_info: etree._Element, target_id: str) -> etree._Element:
    ref = etree.SubElement(signed_info, QName(ns.DS, "Reference"), URI=f"#{target_id}")
    transforms = etree.SubElement(ref, QName(ns.DS, "Transforms"))
    etree.SubElement(transforms, QName(ns.DS, "Transform"), Algorithm=EXC_C14N_URI)
    etree.SubElement(ref, QName(ns.DS, "DigestMethod"), Algorithm=SHA1_URI)
    etree.SubElement(ref, QName(ns.DS, "DigestValue"))
    return ref


def _render_signature(security: etree._Element) -> etree._Element:
    signature = etree.SubElement(security, QName(ns.DS, "Signature"))
    signed_info = etree.SubElement(signature, QName(ns.DS, "SignedInfo"))
    etree.SubElement(signed_info, QName(ns.DS, "CanonicalizationMethod"), Algorithm=EXC_C14N_URI)
    etree.SubElement(signed_info, QName(ns.DS, "SignatureMethod"), Algorithm=RSA_SHA1_URI)
    _render_reference(signed_info, BODY_ID)
    _render_reference(signed_info, TIMESTAMP_ID)
    etree.SubElement(signature, QName(ns.DS, "SignatureValue"))
    key_info = etree.SubElement(signature, QName(ns.DS, "KeyInfo"))
    str_el = etree.SubElement(key_info, QName(ns.WSSE, "SecurityTokenReference"))
    etree.SubElement(
        str_el,
        QName(ns.WSSE, "Reference"),
        URI=f"#{TOKEN_ID}",
        ValueType=X509V3_VALUE_TYPE,
    )
    return signature


def render_envelope(body_payload: etree._Element, now: _dt.datetime) -> etree._Element:
    """Build ``env:Envelope`` with the Security header and ``body_payload`` in the Body."""
    envelope = etree.Element(QName(SOAP_ENV, "Envelope"), nsmap=NSMAP)
    header = etree.SubElement(envelope, QName(SOAP_ENV, "Header"))
    security = etree.SubElement(header, QName(ns.WSSE, "Security"))
    security.set(QName(SOAP_ENV, "mustUnderstand"), "1")
    etree.SubElement(
        security,
        QName(ns.WSSE, "BinarySecurityToken"),
        {
            "EncodingType": BASE64_ENCODING_TYPE,
            "ValueType": X509V3_VALUE_TYPE,
            WSU_ID: TOKEN_ID,
        },
    )
    _render_timestamp(security, now)
    _render_signature(security)

    body = etree.SubElement(envelope, QName(SOAP_ENV, "Body"), {WSU_ID: BODY_ID})
    body.append(body_payload)
    return envelope


def find_by_wsu_id(root: etree._Element, id_value: str) -> Optional[etree._Element]:
    matches = root.xpath("//*[@wsu:Id=$id]", namespaces={"wsu": ns.WSU}, id=id_value)
    return matches[0] if matches else None


def find_security(root: etree._Element) -> Optional[etree._Element]:
    return root.find(f"{{{SOAP_ENV}}}Header/{{{ns.WSSE}}}Security")


def find_signature(root: etree._Element) -> Optional[etree._Element]:
    security = find_security(root)
    if security is None:
        return None
    return security.find(QName(ns.DS, "Signature"))
