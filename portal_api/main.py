from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings
from .deps import Services
from .documents import DocumentStore
from .errors import PortalError
from .logging_config import configure_logging, get_logger
from .routers import applications as applications_router
from .routers import jobs as jobs_router
from .routers import saved_jobs as saved_jobs_router
from .routers import subscribers as subscribers_router
from .uploads import FileIntake

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[DocumentStore] = None,
    intake: Optional[FileIntake] = None,
) -> FastAPI:
    """Build the API around an explicitly constructed store client.

    The store is initialised on startup and closed on shutdown. Tests pass
    their own ``store`` and ``intake``.
    """
    settings = settings or Settings()
    configure_logging(settings)
    store = store or DocumentStore(settings.database_url)
    intake = intake or FileIntake(settings.UPLOAD_DIR)

    app = FastAPI(title=settings.APP_NAME, version="1.0.0")
    app.state.settings = settings
    app.state.services = Services(store, intake)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ✅ Mount routers explicitly
    app.include_router(jobs_router.router)
    app.include_router(applications_router.router)
    app.include_router(subscribers_router.router)
    app.include_router(saved_jobs_router.router)

    @app.on_event("startup")
    def _on_startup():
        try:
            store.init()
        except PortalError as e:
            # keep serving; requests will surface the store failure as 500s
            logger.error("document store unavailable at startup: %s", e.message)

    @app.on_event("shutdown")
    def _on_shutdown():
        store.close()

    @app.exception_handler(PortalError)
    async def _portal_error(request: Request, exc: PortalError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %d %s", request.method, request.url.path, exc.status_code, exc.message)
        return JSONResponse(status_code=exc.status_code, content={"message": exc.message, "status": False})

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return "Hello Developer"

    @app.get("/health")
    def health():
        return {"ok": True, "env": settings.APP_ENV}

    return app


app = create_app()


def run():
    import uvicorn

    settings: Settings = app.state.settings
    logger.info("Server running on port %s", settings.PORT)
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
