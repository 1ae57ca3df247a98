import asyncio
import logging
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes.accounts import router as accounts_router
from app.api.routes.auth import router as auth_router
from app.api.routes.catalog import router as catalog_router
from app.api.routes.parties import router as parties_router
from app.api.routes.purchases import router as purchases_router
from app.api.routes.sales import router as sales_router
from app.api.routes.stock import router as stock_router
from app.core.config import settings
from app.core.errors import AuthError, ServiceError
from app.db.database import SessionLocal
from app.services.alerts import run_alert_scan

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _run_scan_once() -> None:
    db = SessionLocal()
    try:
        run_alert_scan(db)
    except Exception:
        logger.exception("Stock alert scan failed")
        db.rollback()
    finally:
        db.close()


async def _alert_worker() -> None:
    while True:
        # The scan blocks on DB and mail I/O; it runs in a worker thread.
        await asyncio.to_thread(_run_scan_once)
        await asyncio.sleep(max(60, settings.alert_interval_hours * 3600))


@asynccontextmanager
async def lifespan(_: FastAPI):
    task: asyncio.Task | None = None
    if settings.alerts_enabled:
        task = asyncio.create_task(_alert_worker())
    try:
        yield
    finally:
        if task:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task

app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=list(settings.cors_origins),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ServiceError)
async def service_error_handler(_: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("Unhandled service error: %s", exc.message)
    headers = None
    if isinstance(exc, AuthError) and exc.status_code == status.HTTP_401_UNAUTHORIZED:
        headers = {"WWW-Authenticate": "Bearer"}
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message}, headers=headers)


def _describe_validation_error(exc: RequestValidationError) -> str:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return "; ".join(problems) or "Invalid request"


@app.exception_handler(RequestValidationError)
async def request_validation_handler(_: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": _describe_validation_error(exc)},
    )


for router in (
    auth_router,
    accounts_router,
    catalog_router,
    stock_router,
    parties_router,
    purchases_router,
    sales_router,
):
    app.include_router(router, prefix="/api")


@app.get("/health", tags=["System"])
def health_check():
    return {"status": "ok"}
