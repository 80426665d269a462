import os
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from tvboard.db import Base, engine, SIGNAGE_ENV
from tvboard.api import image, layout, screen
from tvboard.errors import SignageError
from tvboard.services import images
from tvboard.services.signals import signals

LOG_LEVEL = os.getenv("SIGNAGE_LOG_LEVEL", "INFO").strip().upper()
API_KEY = os.getenv("SIGNAGE_API_KEY", "").strip()
PUBLIC_DIR = os.getenv("SIGNAGE_PUBLIC_DIR", "").strip() or "public"
QUIET_ACCESS_LOG = os.getenv("SIGNAGE_QUIET_ACCESS_LOG", "1").strip().lower() in {"1", "true", "yes", "on"}

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger("tvboard")

if QUIET_ACCESS_LOG:
    # Viewers poll every few seconds; keep warning/error lines only.
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

Base.metadata.create_all(bind=engine)
images.ensure_storage()
os.makedirs(PUBLIC_DIR, exist_ok=True)

app = FastAPI(title="tvboard")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(SignageError)
async def signage_error_handler(request: Request, exc: SignageError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse({"detail": exc.detail, "kind": exc.kind}, status_code=exc.status_code)


@app.get("/")
def root():
    return {
        "ok": True,
        "service": "tvboard",
        "env": SIGNAGE_ENV,
        "time_utc": datetime.now(timezone.utc).isoformat(),
        "docs": "/docs",
    }


@app.get("/healthz")
def healthz():
    return {"ok": True, "image_dir": images.IMAGE_DIR}


@app.on_event("shutdown")
async def shutdown_events() -> None:
    signals.shutdown()


def _is_public_read(method: str, path: str) -> bool:
    if method not in {"GET", "HEAD"}:
        return False
    if path in {"/", "/healthz"} or path.startswith(("/docs", "/openapi.json", "/redoc")):
        return True
    # Viewers fetch image bytes and default assets without a key.
    if path.startswith(images.IMAGE_URL_PREFIX) and images.is_image_file(path):
        return True
    return not path.startswith("/api/")


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if not API_KEY:
        return await call_next(request)
    if _is_public_read(request.method.upper(), request.url.path):
        return await call_next(request)
    if request.headers.get("X-API-Key") != API_KEY:
        return JSONResponse({"detail": "Unauthorized"}, status_code=401)
    return await call_next(request)


app.include_router(screen.router)
app.include_router(layout.router)
app.include_router(image.router)

# Default per-screen assets (/image1.png ...) live here; mounted last so API routes win.
app.mount("/", StaticFiles(directory=PUBLIC_DIR), name="public")
