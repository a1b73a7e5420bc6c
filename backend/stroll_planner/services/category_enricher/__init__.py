from .service import MAX_CATEGORIES, CategoryEnricherService

__all__ = ["MAX_CATEGORIES", "CategoryEnricherService"]
