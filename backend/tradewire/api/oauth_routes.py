"""
Google OAuth callback.

The client's browser lands here after the consent screen, so every
outcome is rendered as a small HTML page rather than JSON.
"""

import logging
from html import escape
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.responses import HTMLResponse
from sqlalchemy.exc import SQLAlchemyError

from tradewire.api.client_routes import get_authorization_flow
from tradewire.authorization.flow import AuthorizationFlow, CallbackOutcome
from tradewire.core.exceptions import AuthCallbackError, AuthExchangeError

logger = logging.getLogger(__name__)
router = APIRouter(tags=["OAuth"])

OUTCOME_PAGES = {
    CallbackOutcome.AUTHORIZED: (
        200,
        "Success!",
        "Authorization complete. Your advisor can now send trades on your behalf.",
    ),
    CallbackOutcome.NO_REFRESH_TOKEN: (
        200,
        "Almost there",
        "No refresh token received. You may need to revoke access in your Google Account and try again.",
    ),
    CallbackOutcome.UNKNOWN_CLIENT: (
        404,
        "Link not recognised",
        "This authorization link does not match a registered client. Ask your advisor for a new link.",
    ),
}


def render_page(title: str, message: str, status_code: int = 200) -> HTMLResponse:
    content = f"<h1>{escape(title)}</h1><p>{escape(message)}</p>"
    return HTMLResponse(content=content, status_code=status_code)


@router.get("/oauth2callback", response_class=HTMLResponse)
async def oauth2callback(
    code: Optional[str] = None,
    state: Optional[str] = None,
    error: Optional[str] = None,
    flow: AuthorizationFlow = Depends(get_authorization_flow),
):
    try:
        outcome = await flow.handle_callback(code, state, error=error)
    except AuthCallbackError as e:
        return render_page("Authorization failed", str(e), status_code=400)
    except AuthExchangeError:
        return render_page("Authorization failed", "Authentication failed.", status_code=500)
    except SQLAlchemyError as e:
        logger.error(f"Could not store credential for {state}: {e}")
        return render_page("Authorization failed", "Authentication failed.", status_code=500)

    status_code, title, message = OUTCOME_PAGES[outcome]
    return render_page(title, message, status_code=status_code)
