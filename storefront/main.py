"""
Storefront Application

Multi-seller marketplace backend: a stock-aware buyer cart persisted on
this device, live stock tracking, and checkout that places one order per
seller.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from .core.config import Settings, get_settings
from .core.container import build_services
from .routes import (
    products_router,
    cart_router,
    checkout_router,
    orders_router,
    stock_router,
    notifications_router,
    sellers_router,
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI app for the given settings"""
    settings = settings or get_settings()

    # Configure logging
    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        logger.info("Storefront starting up...")
        services = build_services(settings)
        if settings.seed_catalog:
            await services.products.seed()
        services.cart.initialize()
        logger.info(
            f"Pincode lookup: {'offline reference' if settings.pincode_offline else settings.pincode_api_base_url}"
        )
        app.state.services = services

        yield

        logger.info("Storefront shutting down...")
        await services.close()

    app = FastAPI(
        title=settings.app_name,
        description="Multi-seller storefront: cart, live stock and per-seller checkout",
        version="1.0.0",
        lifespan=lifespan,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, restrict this
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(orders_router)
    app.include_router(stock_router)
    app.include_router(notifications_router)
    app.include_router(sellers_router)

    @app.get("/")
    async def home():
        """API index"""
        return {
            "message": "Storefront API",
            "docs": "/docs",
            "endpoints": {
                "products": "/api/products",
                "cart": "/api/cart",
                "checkout": "/api/checkout",
                "orders": "/api/orders",
                "stock": "/api/stock",
                "notifications": "/api/notifications",
                "sellers": "/api/sellers",
            },
        }

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "storefront"}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "storefront.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
