"""
Checkout Pricing API - Main Application.

FastAPI application with CORS enabled for frontend communication.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api import __version__

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI application
app = FastAPI(
    title="Checkout Pricing API",
    description="REST API for pricing carts with promotions, coupons, payment discounts and shipping",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Allow all origins for development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", tags=["Health"])
def health_check():
    """
    Health check endpoint.

    Returns the API status and version.
    """
    return {
        "status": "healthy",
        "version": __version__,
        "service": "checkout-pricing-api"
    }


@app.get("/", tags=["Root"])
def root():
    return {
        "message": "Checkout Pricing API",
        "version": __version__,
        "docs": "/docs",
        "health": "/health"
    }


# Import and include routers
from api.routers import checkout, coupons

app.include_router(checkout.router, prefix="/api/v1", tags=["Checkout"])
app.include_router(coupons.router, prefix="/api/v1", tags=["Coupons"])
