"""
Exception types for transparency log verification.

TrustError subclasses mean verification could not succeed for a checkpoint or
record. RegistryError and WireFormatError belong to the layers around the core.
"""


class TrustError(Exception):
    """Base class for checkpoint and record verification failures."""
    pass


class UnknownKeyError(TrustError):
    """Raised when a key id has no active entry in the key registry."""

    def __init__(self, key_id: str):
        super().__init__(f"Unknown key id: {key_id!r}")
        self.key_id = key_id


class MalformedCheckpointError(TrustError):
    """Raised when checkpoint content fails structural parsing."""
    pass


class SignatureInvalidError(TrustError):
    """Raised when a signature is malformed or does not verify."""
    pass


class UnsupportedAlgorithmError(TrustError):
    """Raised when a key uses an algorithm this build cannot verify."""

    def __init__(self, algorithm: str):
        super().__init__(f"Unsupported signature algorithm: {algorithm!r}")
        self.algorithm = algorithm


class RegistryError(Exception):
    """Raised when key registry population or loading fails."""
    pass


class WireFormatError(Exception):
    """Raised when an upstream log server document has the wrong shape."""
    pass
