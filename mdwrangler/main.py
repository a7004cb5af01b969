import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from mdwrangler.config import Settings
from mdwrangler.errors import register_exception_handlers
from mdwrangler.files.router import router as files_router
from mdwrangler.security.csrf import CsrfSecret
from mdwrangler.security.paths import PathSandbox

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).parent
static_dir = BASE_DIR / "static"


def configure_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def create_app(settings: Settings | None = None, csrf_secret: CsrfSecret | None = None) -> FastAPI:
    """Build the app around one sandbox root and one CSRF secret.

    The secret is generated here unless given, so every process start
    invalidates tokens issued by the previous one.
    """
    if settings is None:
        settings = Settings()

    sandbox = PathSandbox(settings.target_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Watching directory: {sandbox.root}")
        if settings.debug:
            logger.info("Debug mode enabled")
        yield
        logger.info("markdown-wrangler stopped")

    app = FastAPI(title="markdown-wrangler", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.sandbox = sandbox
    app.state.csrf_secret = csrf_secret or CsrfSecret.generate()

    app.mount("/static", StaticFiles(directory=str(static_dir)), name="static")
    register_exception_handlers(app)

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(files_router)
    return app
