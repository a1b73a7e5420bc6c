from .routes import get_container, router

__all__ = ["get_container", "router"]
