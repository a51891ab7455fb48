"""Exceptions raised by a11y-audit."""


class A11yAuditError(Exception):
    """Base class for all a11y-audit errors."""


class InvalidURLError(A11yAuditError, ValueError):
    """The audit target is missing or is not an absolute http(s) URL."""


class AuditBusyError(A11yAuditError):
    """Too many audits are running or queued to accept another one."""


class TaxonomyError(A11yAuditError):
    """A translation dictionary could not be loaded."""


class EngineError(A11yAuditError):
    """The external testing engine failed to produce a result.

    ``category`` names the kind of failure (``TimeoutError``,
    ``NavigationError``, ``EngineNotFound`` ...) so callers can tell a slow
    site apart from a broken installation.
    """

    def __init__(self, category: str, message: str = ""):
        super().__init__(f"{category}: {message}" if message else category)
        self.category = category
        self.message = message
