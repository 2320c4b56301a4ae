# Main application file



import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.middleware.sessions import SessionMiddleware

from poolsite.database import engine, Base
from poolsite.core.auth import LoginRequired
from poolsite.core.config import settings
from poolsite.core.flash import redirect
from poolsite.core.rate_limiter import limiter
from poolsite.routers.auth import RETURN_TO_KEY

# Registers every table on Base.metadata
from poolsite.models import (  # noqa: F401
    contact_messages,
    customers,
    images,
    product_orders,
    products,
    projects,
    sale_items,
    sales,
    services,
    site_settings,
    users,
)
from poolsite.routers import (
    admin,
    auth,
    contacts,
    customers as customers_router,
    exports,
    images as images_router,
    media,
    products as products_router,
    projects as projects_router,
    public,
    reports,
    sales as sales_router,
    services as services_router,
    settings as settings_router,
)


# LOGGING CONFIGURATION

logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger("poolsite")


# STARTUP

def check_database() -> None:
    try:
        with engine.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError:
        if settings.is_production:
            raise
        logger.exception("Database connection check failed")
        return

    if settings.AUTO_CREATE_TABLES:
        Base.metadata.create_all(bind=engine)

    logger.info("Database ready")


@asynccontextmanager
async def lifespan(app: FastAPI):
    check_database()
    yield


# APP INIT

app = FastAPI(
    title="New Generation Pools",
    description="Marketing site and back office for a pool installation business",
    version="1.0.0",
    lifespan=lifespan,
)


# SESSION (flash messages + return_to)

app.add_middleware(
    SessionMiddleware,
    secret_key=settings.SECRET_KEY,
    session_cookie="ngp_flash",
    max_age=settings.SESSION_MAX_AGE_HOURS * 3600,
    same_site="lax",
    https_only=settings.is_production,
)


# RATE LIMITING

app.state.limiter = limiter
app.add_exception_handler(
    RateLimitExceeded,
    _rate_limit_exceeded_handler
)


# AUTHENTICATION FAILURES

@app.exception_handler(LoginRequired)
async def login_required_handler(request: Request, exc: LoginRequired):
    if request.url.path.startswith("/admin/api"):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"detail": "Not authenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )

    if request.method == "GET" and exc.return_to:
        request.session[RETURN_TO_KEY] = exc.return_to

    return redirect("/admin/login")


# REQUEST LOGGING MIDDLEWARE

@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()

    response = await call_next(request)

    duration = round((time.time() - start_time) * 1000, 2)

    logger.info(
        f"{request.method} {request.url.path} "
        f"Status: {response.status_code} "
        f"Time: {duration}ms"
    )

    return response


# ROUTERS

app.include_router(auth.router)
app.include_router(admin.router)
app.include_router(projects_router.router)
app.include_router(services_router.router)
app.include_router(products_router.router)
app.include_router(media.router)
app.include_router(customers_router.router)
# Before the sales router: "/admin/sales/export" must not match "/admin/sales/{sale_id}"
app.include_router(exports.router)
app.include_router(sales_router.router)
app.include_router(reports.router)
app.include_router(contacts.router)
app.include_router(settings_router.router)
app.include_router(images_router.router)
app.include_router(public.router)
