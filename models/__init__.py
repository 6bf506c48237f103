from .base import BaseModel
from .library import Author, Book, Chapter, Segment
from .scraping_error import ScrapingError, ERROR_LEVELS

__all__ = [
    "BaseModel",
    "Author",
    "Book",
    "Chapter",
    "Segment",
    "ScrapingError",
    "ERROR_LEVELS"
]
