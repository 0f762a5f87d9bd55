import asyncio
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from codeplay.core.config import get_settings
from codeplay.core.logging import setup_logging
from codeplay.api.ratelimit import make_limiter
from codeplay.api.routers import execute as r_execute
from codeplay.services.sandbox import SandboxClient, ensure_runtimes_installed

setup_logging()
settings = get_settings()
log = logging.getLogger("codeplay")

app = FastAPI(title=settings.APP_NAME)
app.add_middleware(
    CORSMiddleware, allow_origins=["*"], allow_methods=["POST"], allow_headers=["*"]
)

app.include_router(r_execute.router, prefix=settings.API_PREFIX)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code)


@app.exception_handler(RequestValidationError)
async def validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"error": 'Missing "language" or "code" fields.'}, status_code=400
    )


@app.get("/health")
async def health():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.on_event("startup")
async def open_clients():
    app.state.sandbox = SandboxClient.from_settings(settings)
    app.state.limiter = make_limiter(settings)
    app.state.provisioning = None
    if settings.PROVISION_ON_STARTUP:
        # not awaited: requests are served while runtimes install
        app.state.provisioning = asyncio.create_task(
            ensure_runtimes_installed(app.state.sandbox)
        )


@app.on_event("shutdown")
async def close_clients():
    task = app.state.provisioning
    if task and not task.done():
        task.cancel()
    await app.state.sandbox.aclose()
    await app.state.limiter.aclose()


if __name__ == "__main__":
    import uvicorn

    log.info("Server running on port %s", settings.PORT)
    uvicorn.run(app, host="0.0.0.0", port=settings.PORT, log_config=None)
