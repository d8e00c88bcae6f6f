from uuid import UUID

from fastapi import HTTPException, Request


def get_current_merchant(request: Request) -> UUID:
    """Return the merchant the request acts for.

    Authentication happens upstream (API gateway / session layer); by the time
    a request reaches this service the caller's merchant id has been verified
    and forwarded in the ``X-Merchant-Id`` header.
    """
    raw = request.headers.get("X-Merchant-Id")
    if not raw:
        raise HTTPException(status_code=401, detail="X-Merchant-Id header is required")
    try:
        return UUID(raw)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid X-Merchant-Id header") from None


def get_current_actor(request: Request) -> str | None:
    """Identity of the human or system acting, used for audit entries."""
    return request.headers.get("X-Actor-Id") or None
