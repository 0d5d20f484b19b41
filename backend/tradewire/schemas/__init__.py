from tradewire.schemas.advisor_schema import (
    CamelModel,
    AdvisorCreate,
    AdvisorLogin,
    MessageResponse,
    LoginResponse,
)
from tradewire.schemas.client_schema import AuthLinkRequest, AuthLinkResponse
from tradewire.schemas.trade_schema import TradeRequest, TradeResponse

__all__ = [
    "CamelModel",
    "AdvisorCreate",
    "AdvisorLogin",
    "MessageResponse",
    "LoginResponse",
    "AuthLinkRequest",
    "AuthLinkResponse",
    "TradeRequest",
    "TradeResponse",
]
