# tourdesk/main.py

from typing import Optional

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# ---------------------------------------------
# LOAD ENVIRONMENT VARIABLES
# ---------------------------------------------
load_dotenv()

# ---------------------------------------------
# IMPORT ROUTERS
# ---------------------------------------------
from tourdesk.config.settings import Settings, settings as default_settings  # noqa: E402
from tourdesk.logging_config import get_logger  # noqa: E402
from tourdesk.middleware import request_id_middleware  # noqa: E402
from tourdesk.routers import auth, bookings, health, invoices, payments, users, settings as settings_router  # noqa: E402
from tourdesk.services.rate_limit import RateLimitStore  # noqa: E402
from tourdesk.storage import RecordStore  # noqa: E402

logger = get_logger(__name__)


def create_app(settings: Optional[Settings] = None, store: Optional[RecordStore] = None) -> FastAPI:
    if settings is None:
        settings = default_settings

    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
    )

    # Shared state read by tourdesk.deps; the store is created on first use
    app.state.settings = settings
    app.state.store = store
    app.state.payhere_credentials = None
    app.state.login_limiter = RateLimitStore(settings.LOGIN_RATE_LIMIT, settings.LOGIN_RATE_WINDOW_SECONDS)

    # ---------------------------------------------
    # CORS
    # ---------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.middleware("http")(request_id_middleware)

    # ---------------------------------------------
    # ROUTERS
    # ---------------------------------------------
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
    app.include_router(users.router, prefix="/api/users", tags=["Users"])
    app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])
    app.include_router(bookings.router, prefix="/api/bookings", tags=["Bookings"])
    app.include_router(invoices.router, prefix="/api/invoices", tags=["Invoices"])
    app.include_router(settings_router.router, prefix="/api/settings", tags=["Settings"])

    @app.get("/")
    def root():
        return {"message": f"{settings.APP_NAME} is running"}

    logger.info("app_created", environment=settings.ENVIRONMENT)
    return app


app = create_app()
