"""Exception classes for descriptor detection.

Every error here is scoped to the one descriptor that triggered it; none of
them is fatal to a directory traversal.
"""

from pathlib import Path


class AppDetectError(Exception):
    """Base exception for all appdetect errors.

    Attributes:
        message: Human-readable error message.
        code: Error code for programmatic handling.
    """

    def __init__(self, message: str, code: str = "INTERNAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {
            "error": self.__class__.__name__,
            "code": self.code,
            "message": self.message,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code='{self.code}', message='{self.message}')"


class MalformedDescriptor(AppDetectError):
    """Raised when a pom.xml cannot be read or is not a POM document.

    The traversal skips the file, logs it, and continues elsewhere.
    """

    def __init__(self, path: Path, cause: Exception):
        self.path = path
        self.cause = cause
        super().__init__(f"Malformed descriptor {path}: {cause}", code="MALFORMED_DESCRIPTOR")


class ResolutionUnavailable(AppDetectError):
    """Raised when the external effective-POM renderer fails.

    Covers a missing build tool, non-zero exit, timeout, cancellation and
    unparsable output. Callers fall back to local-only resolution.
    """

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Effective POM unavailable for {path}: {reason}", code="RESOLUTION_UNAVAILABLE")


class CyclicParentChain(AppDetectError):
    """Raised when a parent walk revisits a coordinate already on the path.

    The hierarchy resolver converts this into "no parent resolved".
    """

    def __init__(self, chain: list):
        self.chain = list(chain)
        rendered = " -> ".join(str(c) for c in self.chain)
        super().__init__(f"Cyclic parent chain: {rendered}", code="CYCLIC_PARENT_CHAIN")
