from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.responses import Response

from app.core.config import settings
from app.core.errors import InsufficientFundsError
from app.routers import audit_logs, fulfillment_requests, notifications, orders, wallets

OPENAPI_TAGS = [
    {"name": "Wallet", "description": "Merchant wallet balance, ledger and top-ups."},
    {"name": "Orders", "description": "Register orders, set costs and settle them."},
    {
        "name": "Fulfillment Requests",
        "description": "Settled orders handed to fulfillment operations.",
    },
    {"name": "Notifications", "description": "In-app messages about wallet and order activity."},
    {"name": "Audit Logs", "description": "Who changed what, per resource."},
]

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.version,
    description=(
        "Merchant wallet ledger and order settlement API. "
        "Each order is charged to the wallet at most once and handed to fulfillment."
    ),
    openapi_tags=OPENAPI_TAGS,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[o.strip() for o in settings.CORS_ORIGINS.split(",") if o.strip()],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Total-Count"],
)


@app.middleware("http")
async def options_handler(request: Request, call_next):  # type: ignore[no-untyped-def]
    if request.method == "OPTIONS":
        origin = request.headers.get("origin", "*")
        return Response(
            status_code=200,
            headers={
                "Access-Control-Allow-Origin": origin,
                "Access-Control-Allow-Methods": "*",
                "Access-Control-Allow-Headers": "*",
                "Access-Control-Allow-Credentials": "true",
                "Access-Control-Max-Age": "86400",
            },
        )
    return await call_next(request)


@app.exception_handler(InsufficientFundsError)
async def insufficient_funds_handler(request: Request, exc: InsufficientFundsError) -> JSONResponse:
    return JSONResponse(
        status_code=402,
        content={
            "detail": str(exc),
            "required": exc.required,
            "balance": exc.balance,
            "shortfall": exc.shortfall,
        },
    )


app.include_router(wallets.router, prefix="/v1/wallet", tags=["Wallet"])
app.include_router(orders.router, prefix="/v1/orders", tags=["Orders"])
app.include_router(
    fulfillment_requests.router,
    prefix="/v1/fulfillment_requests",
    tags=["Fulfillment Requests"],
)
app.include_router(notifications.router, prefix="/v1/notifications", tags=["Notifications"])
app.include_router(audit_logs.router, prefix="/v1/audit_logs", tags=["Audit Logs"])


@app.get("/")
async def root() -> dict[str, str]:
    return {
        "app": settings.APP_NAME,
        "version": settings.version,
        "status": "running",
    }


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
