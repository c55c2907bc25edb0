"""Offline XSD validation of built envelopes.

The bundled schemas live in ``nordic_sepa/xml_schemas``. Imports that name
the published remote locations are mapped onto the bundled copies, so loading
never touches the network.
"""
import logging
from pathlib import Path
from typing import List, Optional, Tuple, Union

from lxml import etree

from ..errors import SchemaValidationError
from .envelope import find_security

logger = logging.getLogger(__name__)

XSD_DIR = Path(__file__).resolve().parent.parent / "xml_schemas"

SCHEMAS = {
    "soap": "soap.xsd",
    "wsse": "oasis-200401-wss-wssecurity-secext-1.0.xsd",
    "wsu": "oasis-200401-wss-wssecurity-utility-1.0.xsd",
    "dsig": "xmldsig-core-schema.xsd",
}

MAX_REPORTED_ERRORS = 30


class LocalSchemaResolver(etree.Resolver):
    """Resolves schema imports to files in ``xsd_dir`` by their last path segment."""

    def __init__(self, xsd_dir: Path):
        super().__init__()
        self.xsd_dir = Path(xsd_dir).resolve()

    def resolve(self, url, pubid, context):
        if not url:
            return None
        local_path = self.xsd_dir / url.rstrip("/").split("/")[-1]
        if local_path.exists():
            return self.resolve_filename(str(local_path), context)
        return None


def _parser(xsd_dir: Path) -> etree.XMLParser:
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    parser.resolvers.add(LocalSchemaResolver(xsd_dir))
    return parser


def load_schema(name: str = "soap", xsd_dir: Optional[Path] = None) -> etree.XMLSchema:
    """Load one of the bundled schemas (``soap``, ``wsse``, ``wsu``, ``dsig``)."""
    xsd_dir = Path(xsd_dir) if xsd_dir else XSD_DIR
    try:
        filename = SCHEMAS[name]
    except KeyError:
        raise ValueError(f"Unknown schema {name!r}; expected one of {', '.join(SCHEMAS)}") from None
    doc = etree.parse(str(xsd_dir / filename), _parser(xsd_dir))
    return etree.XMLSchema(doc)


def _as_tree(doc: Union[bytes, str, etree._Element, etree._ElementTree]):
    if isinstance(doc, (bytes, str)):
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        if isinstance(doc, str):
            doc = doc.encode("utf-8")
        return etree.fromstring(doc, parser)
    return doc


def validate_xml(doc, schema: str = "soap") -> Tuple[bool, List[str]]:
    """Validate ``doc`` (bytes or lxml tree) and return ``(ok, errors)``."""
    xsd = load_schema(schema)
    try:
        tree = _as_tree(doc)
    except etree.XMLSyntaxError as exc:
        return False, [f"XML syntax error: {exc}"]
    if xsd.validate(tree):
        return True, []
    errors = []
    for error in list(xsd.error_log)[:MAX_REPORTED_ERRORS]:
        errors.append(f"line {error.line}: {error.message}")
    logger.debug("%s schema validation failed: %s", schema, errors)
    return False, errors


def assert_valid(doc, schema: str = "soap") -> None:
    ok, errors = validate_xml(doc, schema)
    if not ok:
        raise SchemaValidationError(f"Document is not valid against the {schema} schema", errors=errors)


def security_fragment(doc) -> etree._Element:
    """The ``wsse:Security`` header re-parsed as a standalone document."""
    root = _as_tree(doc)
    if isinstance(root, etree._ElementTree):
        root = root.getroot()
    security = find_security(root)
    if security is None:
        raise SchemaValidationError("Envelope has no wsse:Security header")
    return etree.fromstring(etree.tostring(security))
