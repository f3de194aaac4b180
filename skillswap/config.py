"""
SkillSwap Configuration
=======================
Runtime settings, read once from the environment and passed explicitly
into stores, services and the app factory.

Environment Variables:
- DATABASE_URL: PostgreSQL DSN. Unset -> in-memory stores.
- ADMIN_API_KEY: key for X-Admin-API-Key. Unset -> dev mode (open).
- SKILLSWAP_DEFAULT_PAGE_SIZE: browse page size when none is given (4)
- SKILLSWAP_MAX_PAGE_SIZE: upper bound for browse page size (50)
- CORS_ALLOW_ORIGINS: comma separated origins ("*")
- LOG_LEVEL: root log level (INFO)
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple


# Shown for users who have never been rated, regardless of stored rating
DEFAULT_DISPLAY_RATING = 3.5

# Registration seeds a random rating in this closed range (one decimal)
INITIAL_RATING_RANGE: Tuple[float, float] = (3.5, 4.2)

DEFAULT_PAGE_SIZE = 4
MAX_PAGE_SIZE = 50


# Catalogues used by the dummy-user seeder
SKILL_CATALOGUE = [
    "Python", "JavaScript", "Java", "C++", "C#", "Ruby", "Go", "PHP", "Swift", "Kotlin",
    "SQL", "HTML", "CSS", "React", "Angular", "Vue", "Node.js", "Django", "Flask", "Spring",
    "Machine Learning", "Data Science", "DevOps", "UI/UX", "Project Management",
]

LOCATION_CATALOGUE = [
    "Remote", "Onsite", "Hybrid", "New York", "San Francisco", "London",
    "Berlin", "Bangalore", "Tokyo", "Sydney",
]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}")


@dataclass(frozen=True)
class SkillSwapConfig:
    """Immutable runtime settings."""
    database_url: Optional[str] = None
    admin_api_key: Optional[str] = None
    default_page_size: int = DEFAULT_PAGE_SIZE
    max_page_size: int = MAX_PAGE_SIZE
    default_display_rating: float = DEFAULT_DISPLAY_RATING
    initial_rating_range: Tuple[float, float] = INITIAL_RATING_RANGE
    cors_allow_origins: Tuple[str, ...] = field(default_factory=lambda: ("*",))
    log_level: str = "INFO"

    def __post_init__(self):
        if self.default_page_size < 1:
            raise ValueError("default_page_size must be >= 1")
        if self.max_page_size < self.default_page_size:
            raise ValueError("max_page_size must be >= default_page_size")
        low, high = self.initial_rating_range
        if not (0 <= low <= high <= 5):
            raise ValueError("initial_rating_range must lie within [0, 5]")

    @property
    def uses_postgres(self) -> bool:
        return bool(self.database_url)

    @classmethod
    def from_env(cls) -> "SkillSwapConfig":
        origins = os.getenv("CORS_ALLOW_ORIGINS", "*")
        return cls(
            database_url=os.getenv("DATABASE_URL") or None,
            admin_api_key=os.getenv("ADMIN_API_KEY") or None,
            default_page_size=_int_env("SKILLSWAP_DEFAULT_PAGE_SIZE", DEFAULT_PAGE_SIZE),
            max_page_size=_int_env("SKILLSWAP_MAX_PAGE_SIZE", MAX_PAGE_SIZE),
            cors_allow_origins=tuple(o.strip() for o in origins.split(",") if o.strip()),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
        )
