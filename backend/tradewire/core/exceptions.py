"""Domain errors raised by Tradewire services.

Services raise these; routes translate them to HTTP responses. Messages
are safe to show to callers. Provider and database detail belongs in
the server log only.
"""


class TradewireError(Exception):
    """Base class for all Tradewire domain errors."""
    pass


class CryptoIntegrityError(TradewireError):
    """Envelope is malformed or failed authentication."""
    pass


# Session guard

class AuthMissing(TradewireError):
    """No bearer token on the request."""
    pass


class AuthInvalid(TradewireError):
    """Bearer token has a bad signature, is expired or has the wrong shape."""
    pass


# Authorization flow

class AuthCallbackError(TradewireError):
    """OAuth callback arrived without a usable code or state."""
    pass


class AuthExchangeError(TradewireError):
    """Google rejected the code exchange or could not be reached."""
    pass


# Dispatch pipeline

class ClientNotFoundError(TradewireError):
    """Client is unknown, inactive or has not completed authorization."""
    pass


class CredentialCorruptError(TradewireError):
    """Stored refresh token could not be decrypted."""
    pass


class DispatchError(TradewireError):
    """Gmail did not accept the trade instruction."""
    pass


class CredentialRevokedError(DispatchError):
    """Google refused the stored refresh token (revoked or expired grant)."""
    pass


class LogPersistenceError(TradewireError):
    """Trade instruction was sent but the audit entry could not be written."""

    def __init__(self, message: str, message_id: str, broker_email: str):
        super().__init__(message)
        self.message_id = message_id
        self.broker_email = broker_email
