# Application SRS Package
from .engine import SRSEngine, format_interval
from .service import ReviewOutcome, ReviewService

__all__ = ["SRSEngine", "format_interval", "ReviewOutcome", "ReviewService"]
