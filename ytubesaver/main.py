import logging
import os
import uuid
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from rich.console import Console
from starlette.exceptions import HTTPException as StarletteHTTPException
from ytubesaver.api import health, info, download, admin
from ytubesaver.config.settings import config
from ytubesaver.core.errors import ServiceError
from ytubesaver.core.logging import setup_logging
from ytubesaver.core.state import state
from ytubesaver.infra.redis import init_redis, close_redis
from ytubesaver.services.ytdlp import detect_ytdlp_version, resolve_ytdlp_command
from ytubesaver.utils.locale import get_locale
from ytubesaver.i18n import i18n

logger = logging.getLogger("ytubesaver")
console = Console()

os.makedirs(config.download.output_dir, exist_ok=True)

app = FastAPI(
    title=config.api.title,
    version=config.api.version,
    docs_url="/docs" if config.api.debug or not config.is_production else None,
    redoc_url=None
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.api.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.middleware("http")
async def assign_request_id(request: Request, call_next):
    request.state.request_id = request.headers.get("x-request-id") or uuid.uuid4().hex[:12]
    response = await call_next(request)
    response.headers["X-Request-ID"] = request.state.request_id
    return response

# Every failure leaves the API as {success: false, message, error?}
@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    body = {"success": False, "message": exc.message}
    if exc.error:
        body["error"] = exc.error
    return JSONResponse(status_code=exc.status_code, content=body, headers=exc.headers)

@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "message": str(exc.detail)},
        headers=getattr(exc, "headers", None)
    )

@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    locale = get_locale(request.headers.get("accept-language"))
    reason = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()) if p != 'body')}: {err.get('msg')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": i18n.get("error.invalid_request", locale=locale, reason=reason)}
    )

@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception(f"Unhandled error on {request.url.path}")
    locale = get_locale(request.headers.get("accept-language"))
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": i18n.get("error.internal", locale=locale), "error": str(exc)}
    )

# Routes
app.include_router(health.router, tags=["Health"])
app.include_router(info.router, prefix="/api", tags=["Info"])
app.include_router(download.router, prefix="/api", tags=["Download"])
app.include_router(admin.router, prefix="/api", tags=["Admin"])

# Finished downloads, served as-is
app.mount("/downloads", StaticFiles(directory=config.download.output_dir, check_dir=False), name="downloads")

@app.on_event("startup")
async def startup_event():
    setup_logging()
    os.makedirs(config.download.output_dir, exist_ok=True)

    command = resolve_ytdlp_command()
    version = await detect_ytdlp_version()
    if version:
        state.ytdlp_version = version
        console.print(f"[green]✓ yt-dlp {version}[/green] ({' '.join(command)})")
    else:
        console.print(
            "[yellow]⚠ yt-dlp is not available. Install it with `pip install yt-dlp` "
            "or set YT_DLP_PATH.[/yellow]"
        )

    await init_redis()
    console.print(f"[bold]{config.api.title}[/bold] on port {config.server.port} ({config.server.environment})")
    console.print(f"Downloads directory: {os.path.abspath(config.download.output_dir)}")

@app.on_event("shutdown")
async def shutdown_event():
    await close_redis()

def run():
    """Console entry point"""
    import uvicorn

    uvicorn.run(
        "ytubesaver.main:app",
        host=config.server.host,
        port=config.server.port,
        reload=not config.is_production and config.api.debug,
    )

if __name__ == "__main__":
    run()
