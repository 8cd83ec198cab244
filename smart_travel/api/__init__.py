"""HTTP API for the travel planner."""
from .routes import router

__all__ = ["router"]
