from .service import CategoryCatalogService

__all__ = ["CategoryCatalogService"]
