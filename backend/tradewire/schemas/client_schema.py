from pydantic import EmailStr, field_validator

from tradewire.schemas.advisor_schema import CamelModel


class AuthLinkRequest(CamelModel):
    client_name: str
    client_email: EmailStr
    broker_email: EmailStr

    @field_validator("client_name")
    @classmethod
    def validate_client_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Client name is required")
        return v


class AuthLinkResponse(CamelModel):
    auth_url: str
