import base64
import os
import logging
from pathlib import Path

from nordic_sepa import SepaError, build_request
from nordic_sepa.soap.schema import validate_xml

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger("example_upload")

def main():
    keys = Path(os.getenv("SEPA_KEYS_DIR", "keys"))
    payload = Path(os.getenv("SEPA_PAYLOAD", "pain.001.xml"))

    params = {
        "bank": os.getenv("SEPA_BANK", "danske"),
        "command": "upload_file",
        "customer_id": os.getenv("SEPA_CUSTOMER_ID", "360817"),
        "environment": os.getenv("SEPA_ENVIRONMENT", "TEST"),
        "private_key_path": keys / "signing_private_key.pem",
        "cert_path": keys / "signing_cert.pem",
        "enc_cert_path": keys / "bank_encryption_cert.pem",
        "language": "EN",
        "target_id": os.getenv("SEPA_TARGET_ID", "Danske FI"),
        "file_type": "pain.001.001.02",
        # Content goes into the Body as-is, so encode before passing it in
        "content": base64.b64encode(payload.read_bytes()).decode("ascii"),
    }

    try:
        xml = build_request(params)
    except SepaError as e:
        logger.error(f"Could not build request: {e}")
        return

    ok, errors = validate_xml(xml, "soap")
    logger.info(f"Envelope valid against SOAP schema: {ok}")
    for error in errors:
        logger.warning(error)

    out = Path(os.getenv("SEPA_OUT", "request.xml"))
    out.write_bytes(xml)
    logger.info(f"Wrote {len(xml)} bytes to {out}")

if __name__ == "__main__":
    main()
