import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.auth.dependencies import AdvisorIdentity, get_current_advisor
from tradewire.authorization.flow import AuthorizationFlow
from tradewire.core.cipher import CredentialCipher, get_cipher
from tradewire.database import get_db
from tradewire.google.oauth import GoogleOAuthClient, get_oauth_client
from tradewire.schemas.client_schema import AuthLinkRequest, AuthLinkResponse

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Clients"])


async def get_authorization_flow(
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> AuthorizationFlow:
    return AuthorizationFlow(db, cipher, oauth_client)


@router.post("/generate-auth-link", response_model=AuthLinkResponse)
async def generate_auth_link(
    request: AuthLinkRequest,
    advisor: AdvisorIdentity = Depends(get_current_advisor),
    flow: AuthorizationFlow = Depends(get_authorization_flow),
):
    try:
        auth_url = await flow.generate_auth_link(
            advisor,
            name=request.client_name,
            client_email=request.client_email,
            broker_email=request.broker_email,
        )
    except SQLAlchemyError as e:
        logger.error(f"Could not register client {request.client_email}: {e}")
        raise HTTPException(status_code=500, detail="Could not generate authorization link.")
    return AuthLinkResponse(auth_url=auth_url)
