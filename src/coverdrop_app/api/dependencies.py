"""Request-scoped dependencies shared by the routers."""

from __future__ import annotations

from fastapi import Header, HTTPException, Request, status

from coverdrop_app.core.container import ServiceContainer

CALLER_HEADER = "X-Caller-Id"


def get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def require_caller(x_caller_id: str | None = Header(None, alias=CALLER_HEADER)) -> str:
    """Return the authenticated caller id forwarded by the gateway."""
    caller = (x_caller_id or "").strip()
    if not caller:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED,
            detail={
                "error": {
                    "code": "CALLER_REQUIRED",
                    "message": f"Missing {CALLER_HEADER} header",
                    "category": "authorization",
                    "severity": "warning",
                }
            },
        )
    return caller
