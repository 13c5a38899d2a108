"""
Catch-all proxy for the external authentication service.

Sign-up, sign-in, sign-out, password reset, email verification, 2FA, passkeys,
social login and organisation management are all served by the auth service;
this router relays /api/auth/* to it unchanged.
"""
from fastapi import APIRouter, Request

from app.clients.auth_client import auth_client

router = APIRouter()


@router.api_route(
    "/{path:path}",
    methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    include_in_schema=False,
)
async def proxy_auth(path: str, request: Request):
    return await auth_client.forward(request)
