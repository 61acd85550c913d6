"""FastAPI application entry point.

Run with: uvicorn dancemix.main:app --port 8080 --reload
"""

import os
import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, HTMLResponse
from fastapi.staticfiles import StaticFiles

from dancemix.config import CONFIG_PATH
from dancemix.state import get_state, reset_state

_project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
_public_dir = os.path.join(_project_root, "public")


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------
_log_file = os.path.join(_project_root, "output", "app.log")
os.makedirs(os.path.dirname(_log_file), exist_ok=True)
_handler = RotatingFileHandler(_log_file, maxBytes=2_000_000, backupCount=3)
_handler.setLevel(logging.DEBUG)
_handler.setFormatter(logging.Formatter(
    "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
))
logging.root.addHandler(_handler)
logging.root.setLevel(logging.DEBUG)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Lifespan: startup / shutdown hooks
# ---------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    get_state()
    logger.info("DanceMix starting up, config at %s", CONFIG_PATH)
    yield
    logger.info("DanceMix shutting down")
    reset_state()


# ---------------------------------------------------------------------------
# App
# ---------------------------------------------------------------------------
app = FastAPI(
    title="DanceMix",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
from dancemix.routers import config_routes, generate, login  # noqa: E402

app.include_router(config_routes.router)
app.include_router(generate.router)
app.include_router(login.router)


# ---------------------------------------------------------------------------
# Frontend: static page from public/ when present
# ---------------------------------------------------------------------------
_index_path = os.path.join(_public_dir, "index.html")

if os.path.isdir(_public_dir):
    app.mount("/static", StaticFiles(directory=_public_dir), name="static")


@app.get("/", response_class=HTMLResponse)
async def index():
    if not os.path.isfile(_index_path):
        return HTMLResponse("<h1>DanceMix</h1><p>No frontend in public/.</p>")
    return FileResponse(_index_path)


# ---------------------------------------------------------------------------
# CLI runner
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", "8080"))
    print(f"\n  DanceMix is running at http://localhost:{port}")
    print(f"  Logging to {_log_file}\n")
    uvicorn.run("dancemix.main:app", host="127.0.0.1", port=port, reload=True)
