"""
SkillSwap Match Engine

Answers "who should this viewer see?": public, non-banned users filtered by
skill term, mutual benefit, location and availability, ranked by rating and
paged.

Version: match_engine_v1
"""

from .models import BrowseFilters, BrowsePage, SelectionBranch
from .match import MatchEngine, choose_branch, select_candidates, rank_by_rating, paginate

__all__ = [
    "BrowseFilters",
    "BrowsePage",
    "SelectionBranch",
    "MatchEngine",
    "choose_branch",
    "select_candidates",
    "rank_by_rating",
    "paginate",
]

__version__ = "match_engine_v1"
