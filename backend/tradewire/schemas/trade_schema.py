from typing import Optional

from pydantic import EmailStr, field_validator

from tradewire.schemas.advisor_schema import CamelModel

AUDIT_LOGGED = "Logged Successfully"
AUDIT_NOT_LOGGED = "NOT_LOGGED"


class TradeRequest(CamelModel):
    client_email: EmailStr
    trade_details: str

    @field_validator("trade_details")
    @classmethod
    def validate_trade_details(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Trade details are required")
        return v


class TradeResponse(CamelModel):
    success: bool
    message_id: str
    broker: str
    audit_status: str
    error: Optional[str] = None
