import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lenscart import __version__
from lenscart.api.deps import get_settings
from lenscart.app_shell.config import validate_ops_rules
from lenscart.rules.loader import load_rules

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    settings = get_settings()

    # Load rules and validate on startup (fail-fast)
    try:
        rules = load_rules(settings.rules_path)
        validate_ops_rules(rules, settings.data_dir)
    except Exception:
        logger.critical("Startup configuration failed", exc_info=True)
        raise
    logger.info("Rules loaded from %s", settings.rules_path)

    yield


app = FastAPI(
    title="LensCart API",
    version=__version__,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from lenscart.api.routes import (  # noqa: E402
    admin_lens_types,
    admin_orders,
    admin_products,
    cart,
    checkout,
    orders,
    prescriptions,
    products,
)

app.include_router(products.router, prefix="/api/products", tags=["Products"])
app.include_router(prescriptions.router, prefix="/api/prescriptions", tags=["Prescriptions"])
app.include_router(cart.router, prefix="/api/cart", tags=["Cart"])
app.include_router(checkout.router, prefix="/api/checkout", tags=["Checkout"])
app.include_router(orders.router, prefix="/api/orders", tags=["Orders"])
app.include_router(admin_orders.router, prefix="/api/admin/orders", tags=["Admin Orders"])
app.include_router(admin_lens_types.router, prefix="/api/admin", tags=["Admin Lens Types"])
app.include_router(admin_products.router, prefix="/api/admin", tags=["Admin Products"])


# CORS (Allow Frontend)
origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
