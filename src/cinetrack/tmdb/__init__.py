from .client import TMDBClient
from .service import MetadataService, add_media_type, filter_media_results

__all__ = ["TMDBClient", "MetadataService", "add_media_type", "filter_media_results"]
