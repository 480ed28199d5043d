"""
Mock Storefront Application

In-memory storefront API: server cart, shipping quotes, gateway payment
intents and order creation after payment verification.
"""

import logging
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import settings
from .routes import auth_router, cart_router, orders_router

# Load environment variables
load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Mock Storefront starting up...")
    logger.info(f"Gateway key: {settings.gateway_key_id}")
    logger.info(f"Shipping charge: {settings.shipping_charge} {settings.currency}")
    yield
    logger.info("Mock Storefront shutting down...")


# Create FastAPI app
app = FastAPI(
    title="Mock Storefront",
    description="Simulated storefront API for cart and checkout development",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include API routers
app.include_router(auth_router)
app.include_router(cart_router)
app.include_router(orders_router)


@app.get("/")
async def home():
    """API index"""
    return {
        "message": "Mock Storefront API",
        "docs": "/docs",
        "endpoints": {
            "auth": "/api/auth/token",
            "cart": "/api/cart",
            "orders": "/api/orders",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "service": "mock-storefront"}


def run() -> None:
    """Run the mock server with uvicorn"""
    import uvicorn

    uvicorn.run(
        "mock_storefront.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()
