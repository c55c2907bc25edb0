from typing import Optional, Sequence


class SepaError(RuntimeError):
    """Base class for any error raised while building a bank request."""


class MissingParameter(SepaError):
    """A field required by the selected bank/command is absent or empty."""

    def __init__(self, field: str):
        super().__init__(f"Missing required parameter: {field}")
        self.field = field


class InvalidParameter(SepaError):
    """A parameter is present but holds an unusable value."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"Invalid parameter {field}: {reason}")
        self.field = field
        self.reason = reason


class UnsupportedCommand(SepaError):
    """No request variant exists for the bank/command pair."""

    def __init__(self, bank: str, command: str):
        super().__init__(f"Command {command!r} is not supported for bank {bank!r}")
        self.bank = bank
        self.command = command


class CertificateError(SepaError):
    """Certificate file missing, unreadable, or not X.509."""

    def __init__(self, msg: str, *, path: Optional[str] = None):
        super().__init__(msg)
        self.path = path


class SigningError(SepaError):
    """The signing operation itself failed."""
    pass


class PrivateKeyError(SigningError):
    """Private key file missing, unreadable, or not an RSA key."""

    def __init__(self, msg: str, *, path: Optional[str] = None):
        super().__init__(msg)
        self.path = path


class CanonicalizationError(SepaError):
    """A sub-tree could not be canonicalized (broken envelope state)."""
    pass


class EncryptionError(SepaError):
    """Application request encryption failed."""
    pass


class SchemaValidationError(SepaError):
    """Document does not validate against the XSD."""

    def __init__(self, msg: str, *, errors: Sequence[str] = ()):
        super().__init__(msg)
        self.errors = list(errors)
