"""
Authentication service client.

Credentials, sessions, password resets, 2FA, passkeys and social login all
live in an external auth service. This API only needs two things from it:

  • get_session(headers) — resolve the caller's session from the cookies /
    Authorization header it sent us. Any failure is treated as "no session".
  • forward(request)     — proxy /api/auth/* verbatim so clients talk to a
    single origin.
"""
import logging
from typing import Mapping, Optional

import httpx
from fastapi import HTTPException, Request, Response, status

from app.config import settings
from app.schemas import Session
from app.telemetry import SESSION_LOOKUP_ERRORS_TOTAL

logger = logging.getLogger(__name__)

# Headers that identify the caller to the auth service
_CREDENTIAL_HEADERS = ("cookie", "authorization")

# Not copied between the two legs of a proxied request
_HOP_BY_HOP = {
    "host",
    "connection",
    "keep-alive",
    "content-length",
    "content-encoding",
    "transfer-encoding",
    "upgrade",
}


class AuthClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._base_url = base_url or settings.auth_service_url
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        self._http = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=settings.auth_timeout_seconds,
            transport=self._transport,
        )
        logger.info("Auth client ready → %s", self._base_url)

    async def stop(self) -> None:
        if self._http:
            await self._http.aclose()
            self._http = None

    async def get_session(self, headers: Mapping[str, str]) -> Optional[Session]:
        """
        Ask the auth service who is calling.

        Returns None when there is no session and also when the lookup
        itself fails (network error, bad status, unexpected payload).
        """
        forwarded = {k: headers[k] for k in _CREDENTIAL_HEADERS if k in headers}
        if not forwarded:
            return None

        try:
            if self._http is None:
                raise RuntimeError("Auth client not started")
            resp = await self._http.get(settings.auth_session_path, headers=forwarded)
            resp.raise_for_status()
            payload = resp.json()
            if not payload or not payload.get("user"):
                return None
            return Session.model_validate(payload)
        except Exception as exc:
            logger.warning("Session lookup failed: %s — treating as anonymous", exc)
            SESSION_LOOKUP_ERRORS_TOTAL.inc()
            return None

    async def forward(self, request: Request) -> Response:
        """Proxy one request to the auth service and relay its answer."""
        if self._http is None:
            raise RuntimeError("Auth client not started")

        headers = {
            k: v for k, v in request.headers.items() if k.lower() not in _HOP_BY_HOP
        }
        try:
            upstream = await self._http.request(
                request.method,
                request.url.path,
                params=request.query_params,
                headers=headers,
                content=await request.body(),
            )
        except httpx.HTTPError as exc:
            logger.error("Auth service unreachable: %s", exc)
            raise HTTPException(
                status_code=status.HTTP_502_BAD_GATEWAY,
                detail="Authentication service unavailable",
            )

        response = Response(content=upstream.content, status_code=upstream.status_code)
        for key, value in upstream.headers.multi_items():
            if key.lower() not in _HOP_BY_HOP:
                # append, not set: auth responses carry several Set-Cookie headers
                response.headers.append(key, value)
        return response


# Singleton
auth_client = AuthClient()
