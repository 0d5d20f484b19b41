import asyncio
import logging
from typing import Any, Dict, Optional, Tuple

import aiohttp

logger = logging.getLogger(__name__)


class GoogleAPIError(Exception):
    """Google answered with an error or could not be reached.

    ``status`` is None for transport failures. ``error`` is Google's short
    error code (e.g. ``invalid_grant``) when one was returned.
    """

    def __init__(self, status: Optional[int], error: str, description: str = ""):
        super().__init__(f"{status} {error}: {description}" if status else f"{error}: {description}")
        self.status = status
        self.error = error
        self.description = description


class GoogleHTTPClient:
    """Shared HTTP plumbing for the Google endpoints.

    Holds configuration only. Every request opens its own ClientSession so
    a single instance can serve concurrent requests.
    """

    def __init__(self, timeout_seconds: float = 30.0):
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)

    async def _post(
        self,
        url: str,
        *,
        data: Optional[Dict[str, str]] = None,
        json: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Tuple[int, Dict[str, Any]]:
        try:
            async with aiohttp.ClientSession(timeout=self.timeout) as session:
                async with session.post(url, data=data, json=json, headers=headers) as response:
                    try:
                        payload = await response.json(content_type=None)
                    except ValueError:
                        payload = {}
                    return response.status, payload if isinstance(payload, dict) else {}
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error(f"HTTP request failed: {url} - {e!r}")
            raise GoogleAPIError(None, "network_error", str(e)) from e
