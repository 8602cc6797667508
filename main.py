from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from shared.config.database import engine, Base
from shared.config.settings import get_settings
from shared.errors import StorefrontError
from shared.observability import setup_observability
from shared.security import limiter

# IMPORTANT: import models so they register with Base
from services.product_service import models as product_models
from services.order_service import models as order_models
from services.payment_service import models as payment_models
from services.auth_service import models as auth_models

from services.product_service.router import router as admin_product_router, public_router as product_router
from services.order_service.router import router as admin_order_router, public_router as order_router
from services.payment_service.router import router as admin_transaction_router
from services.checkout_service.router import router as checkout_router
from services.auth_service.router import router as auth_router, users_router as admin_users_router

settings = get_settings()

app = FastAPI(title=settings.app_name, version="1.0.0")

# --- OBSERVABILITY BOOTSTRAP ---
setup_observability(
    app,
    "storefront",
    log_level=settings.log_level,
    otlp_endpoint=settings.otlp_endpoint,
)

# --- SECURITY SETUP ---
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(StorefrontError)
async def storefront_error_handler(request: Request, exc: StorefrontError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message})


@app.on_event("startup")
async def startup_event():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@app.get("/health", include_in_schema=False)
async def health_check():
    return {"service": "storefront", "status": "running"}


# Storefront
app.include_router(product_router, prefix="/api/products", tags=["Products"])
app.include_router(order_router, prefix="/api/orders", tags=["Orders"])
app.include_router(checkout_router, prefix="/api/checkout", tags=["Checkout"])

# Back office
app.include_router(auth_router, prefix="/api/admin/auth")
app.include_router(admin_users_router, prefix="/api/admin/users")
app.include_router(admin_product_router, prefix="/api/admin/products", tags=["Admin products"])
app.include_router(admin_order_router, prefix="/api/admin/orders", tags=["Admin orders"])
app.include_router(admin_transaction_router, prefix="/api/admin/transactions", tags=["Admin transactions"])
