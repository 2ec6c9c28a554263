"""
FastAPI Backend for FinEase

Provides REST API endpoints for the finance tracker frontend.
"""

from .main import app

__all__ = ["app"]
