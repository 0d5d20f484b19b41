import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tradewire.auth.dependencies import AdvisorIdentity, get_current_advisor
from tradewire.core.cipher import CredentialCipher, get_cipher
from tradewire.core.exceptions import (
    ClientNotFoundError,
    CredentialCorruptError,
    DispatchError,
    LogPersistenceError,
)
from tradewire.database import get_db
from tradewire.dispatch.pipeline import TradeDispatchPipeline
from tradewire.google.gmail import GmailClient, get_gmail_client
from tradewire.google.oauth import GoogleOAuthClient, get_oauth_client
from tradewire.schemas.trade_schema import (
    AUDIT_LOGGED,
    AUDIT_NOT_LOGGED,
    TradeRequest,
    TradeResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Trades"])


async def get_dispatch_pipeline(
    db: AsyncSession = Depends(get_db),
    cipher: CredentialCipher = Depends(get_cipher),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    gmail_client: GmailClient = Depends(get_gmail_client),
) -> TradeDispatchPipeline:
    return TradeDispatchPipeline(db, cipher, oauth_client, gmail_client)


@router.post("/send-trade", response_model=TradeResponse, response_model_exclude_none=True)
async def send_trade(
    request: TradeRequest,
    advisor: AdvisorIdentity = Depends(get_current_advisor),
    pipeline: TradeDispatchPipeline = Depends(get_dispatch_pipeline),
):
    # Audit attribution comes from the session token, never the body
    try:
        result = await pipeline.dispatch_trade(advisor, request.client_email, request.trade_details)
    except ClientNotFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except CredentialCorruptError as e:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))
    except DispatchError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except LogPersistenceError as e:
        body = TradeResponse(
            success=False,
            message_id=e.message_id,
            broker=e.broker_email,
            audit_status=AUDIT_NOT_LOGGED,
            error=str(e),
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=body.model_dump(by_alias=True),
        )
    except SQLAlchemyError as e:
        logger.error(f"Trade Send Error for {request.client_email}: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Failed to send trade.")

    return TradeResponse(
        success=True,
        message_id=result.message_id,
        broker=result.broker_email,
        audit_status=AUDIT_LOGGED,
    )
