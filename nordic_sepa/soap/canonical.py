"""Exclusive XML canonicalization and reference digests.

Canonicalization is delegated to libxml2 through lxml; this module only pins
the mode and maps failures onto :class:`CanonicalizationError`.
"""
import base64
import hashlib
import logging
from dataclasses import dataclass
from typing import Tuple

from lxml import etree
from lxml.etree import QName
from zeep import ns

from ..errors import CanonicalizationError
from .envelope import EXC_C14N_URI, find_by_wsu_id, find_signature

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class C14nMode:
    exclusive: bool = True
    with_comments: bool = False
    inclusive_ns_prefixes: Tuple[str, ...] = ()

    @property
    def algorithm(self) -> str:
        if self.exclusive:
            return EXC_C14N_URI + ("WithComments" if self.with_comments else "")
        uri = "http://www.w3.org/TR/2001/REC-xml-c14n-20010315"
        return uri + "#WithComments" if self.with_comments else uri


EXC_C14N = C14nMode()


def canonicalize(node: etree._Element, mode: C14nMode = EXC_C14N) -> bytes:
    if node is None:
        raise CanonicalizationError("Nothing to canonicalize")
    try:
        return etree.tostring(
            node,
            method="c14n",
            exclusive=mode.exclusive,
            with_comments=mode.with_comments,
            inclusive_ns_prefixes=list(mode.inclusive_ns_prefixes) or None,
        )
    except (TypeError, ValueError, etree.LxmlError) as exc:
        raise CanonicalizationError(f"Cannot canonicalize {node.tag}") from exc


def digest_b64(data: bytes) -> str:
    return base64.b64encode(hashlib.sha1(data).digest()).decode("ascii")


def fill_digests(envelope: etree._Element) -> None:
    """Write the digest of each referenced element into its DigestValue."""
    signature = find_signature(envelope)
    if signature is None:
        raise CanonicalizationError("Envelope has no Signature block")
    refs = signature.findall(f"{{{ns.DS}}}SignedInfo/{{{ns.DS}}}Reference")
    if not refs:
        raise CanonicalizationError("SignedInfo has no references")
    for ref in refs:
        target_id = (ref.get("URI") or "").lstrip("#")
        target = find_by_wsu_id(envelope, target_id)
        if target is None:
            raise CanonicalizationError(f"Reference target #{target_id} not found")
        digest_value = ref.find(QName(ns.DS, "DigestValue"))
        digest_value.text = digest_b64(canonicalize(target))
        logger.debug("Digest for #%s: %s", target_id, digest_value.text)
