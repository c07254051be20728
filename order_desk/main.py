"""
Order Desk Application

Backs the purchase drawer on product pages: pack sizes, basket and
delivery-quote requests.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load environment variables before settings are read
load_dotenv()

from .core.config import settings
from .routes import products_router, checkout_router
from .services.order_sink import build_order_sink

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Order Desk starting up...")
    logger.info(f"Order sink: {settings.order_sink_backend} (configured: {settings.order_sink_configured})")
    app.state.order_sink = build_order_sink(settings)

    yield

    logger.info("Order Desk shutting down...")
    close = getattr(app.state.order_sink, "close", None)
    if close is not None:
        await close()


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Pack sizes, basket and delivery-quote requests for product pages",
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
app.include_router(products_router)
app.include_router(checkout_router)


@app.get("/")
async def home():
    return {
        "message": "Order Desk API",
        "docs": "/docs",
        "endpoints": {
            "products": "/api/products",
            "checkout": "/api/checkout/sessions",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": "order-desk",
        "order_sink_configured": settings.order_sink_configured,
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "order_desk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
