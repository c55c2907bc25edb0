import datetime as _dt
import logging
from datetime import timezone
from typing import Callable, Mapping, Optional, Union

from lxml import etree

from ..application_request import new_request_id
from ..commands import BANKS, lookup
from ..config import RequestParams
from ..validation import validate
from .canonical import fill_digests
from .envelope import render_envelope
from .signer import EnvelopeSigner

logger = logging.getLogger(__name__)

Clock = Callable[[], _dt.datetime]


def _utc_now() -> _dt.datetime:
    return _dt.datetime.now(timezone.utc)


class SoapBuilder:
    """Builds signed WS-Security SOAP requests for the bank file service.

    Every :meth:`build` call renders a new document with a fresh Timestamp,
    RequestId and signature. Nothing is cached between calls.
    """

    def __init__(
        self,
        params: Union[RequestParams, Mapping[str, object]],
        *,
        clock: Optional[Clock] = None,
    ):
        if not isinstance(params, RequestParams):
            params = RequestParams.from_mapping(params)
        self.params = params
        self._clock = clock or _utc_now

    def _now(self) -> _dt.datetime:
        now = self._clock()
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)

    def build_tree(self) -> etree._Element:
        params = self.params
        validate(params)
        spec = lookup(params.bank, params.command)
        signer = EnvelopeSigner.from_files(params.private_key_path, params.cert_path)

        now = self._now()
        request_id = params.request_id or new_request_id()
        payload = spec.render_body(params, BANKS[params.bank], now, request_id)
        envelope = render_envelope(payload, now)
        logger.debug("Rendered %s/%s envelope skeleton", params.bank, params.command)

        fill_digests(envelope)
        signer.sign(envelope)
        logger.info(
            "Built signed %s request for %s (request id %s)",
            params.command,
            params.bank,
            request_id,
        )
        return envelope

    def build(self) -> bytes:
        """Return the signed envelope serialized as UTF-8 XML."""
        return etree.tostring(self.build_tree(), xml_declaration=True, encoding="UTF-8")


def build_request(
    params: Union[RequestParams, Mapping[str, object]],
    *,
    clock: Optional[Clock] = None,
) -> bytes:
    return SoapBuilder(params, clock=clock).build()
