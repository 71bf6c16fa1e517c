"""Error taxonomy shared by the provider client, stores, and pipeline units."""


class PollerError(Exception):
    """Base class for every error raised by the poller."""


class TransportError(PollerError):
    """Network or HTTP failure talking to the provider."""


class DecodeError(PollerError):
    """Provider returned malformed or unexpected JSON."""


class PersistenceError(PollerError):
    """Store read or write failed."""


class AuthError(PollerError):
    """Authorization code was empty or rejected during account linking."""
