"""Exception types shared across awaybot."""


class AwaybotError(Exception):
    """Base class for awaybot errors."""


class ConfigPersistError(AwaybotError):
    """The policy configuration could not be written to disk."""


class TransportError(AwaybotError):
    """The messaging transport failed in a recoverable way."""


class LoggedOutError(TransportError):
    """The account session was logged out; reconnecting is pointless."""

    def __init__(self, reason: str = "loggedOut"):
        super().__init__(
            "WhatsApp session logged out. Remove the bridge auth directory "
            "and pair again by scanning the QR code."
        )
        self.reason = reason
