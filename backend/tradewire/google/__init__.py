from tradewire.google.base import GoogleAPIError
from tradewire.google.oauth import GoogleOAuthClient, TokenSet, GMAIL_SEND_SCOPE, get_oauth_client
from tradewire.google.gmail import GmailClient, get_gmail_client

__all__ = [
    "GoogleAPIError",
    "GoogleOAuthClient",
    "TokenSet",
    "GMAIL_SEND_SCOPE",
    "get_oauth_client",
    "GmailClient",
    "get_gmail_client",
]
