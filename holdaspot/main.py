from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from holdaspot.api.v1.api import api_router
from holdaspot.core.config import settings
from holdaspot.core.database import init_db
from holdaspot.core.exceptions import HoldASpotException

# =====================================================
# LOGGING
# =====================================================
logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
log = logging.getLogger("holdaspot.main")


# =====================================================
# LIFESPAN
# =====================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    await init_db()
    log.info(f"{settings.APP_NAME} {settings.APP_VERSION} started")
    yield
    log.info(f"{settings.APP_NAME} stopped")


# =====================================================
# CREATE APP
# =====================================================
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_HOSTS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =====================================================
# ERRORS -> {error, details?, code?}
# =====================================================
def error_body(message: str, details=None, code=None) -> dict:
    body = {"error": message}
    if details:
        body["details"] = details
    if code:
        body["code"] = code
    return body


@app.exception_handler(HoldASpotException)
async def holdaspot_exception_handler(request: Request, exc: HoldASpotException):
    if exc.status_code >= 500:
        log.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.message, exc.details, exc.code),
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    missing = [str(e["loc"][-1]) for e in errors if e.get("type") == "missing"]
    if missing:
        return JSONResponse(
            status_code=400,
            content=error_body(f"Missing required fields: {', '.join(missing)}", code="validation_error"),
        )

    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:])
    message = str(first.get("msg", "Invalid request"))
    if message.startswith("Value error, "):
        message = message[len("Value error, "):]
    return JSONResponse(
        status_code=400,
        content=error_body(message, f"Invalid value for {field}" if field else None, "validation_error"),
    )


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(status_code=exc.status_code, content=error_body(str(exc.detail)))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    log.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


# =====================================================
# ROUTES
# =====================================================
@app.get("/health")
async def health():
    return {"status": "ok"}


app.include_router(api_router, prefix=settings.API_PREFIX)


# =====================================================
# ENTRYPOINT
# =====================================================
def run():
    uvicorn.run(
        "holdaspot.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )


if __name__ == "__main__":
    run()
