"""Exception taxonomy for the resolver.

Engine-level failures are raised inside adapters and converted into
EngineResult errors by the dispatcher; they never escape `resolve()`.
UnknownContentTypeError is a caller bug and does propagate.
"""


class ResolverError(Exception):
    """Base class for resolver errors."""


class EngineFailure(ResolverError):
    """One engine errored or timed out."""

    def __init__(self, engine: str, message: str):
        self.engine = engine
        self.message = message
        super().__init__(message)


class EngineRequestError(EngineFailure):
    """An HTTP engine answered with a non-2xx status."""

    def __init__(self, engine: str, status_code: int, url: str = ""):
        self.status_code = status_code
        self.url = url
        super().__init__(engine, f"{engine} search failed: HTTP {status_code}")


class EngineNotReadyError(EngineFailure):
    """An in-memory engine was asked to search before a catalog was loaded."""

    def __init__(self, engine: str):
        super().__init__(engine, f"{engine} engine not initialized")


class UnknownContentTypeError(ResolverError, ValueError):
    def __init__(self, content_type: str):
        self.content_type = content_type
        super().__init__(f"Unknown content type: {content_type!r}")
