"""
Match Engine Core Logic

Produces the ranked, filtered, paginated candidate list for a viewer.

Pipeline:
1. Eligible candidates from the store: public, not banned, not the viewer,
   pre-filtered by location substring and availability slots
2. Pick exactly one selection branch and apply it
3. Stable sort by stored rating, descending
4. Slice the requested page; total counts the full filtered set

The engine is read-only and holds no state between calls: the same
filters over unchanged data always give the same page.

Version: match_engine_v1
"""

import logging
from typing import List, Optional, Tuple

from skillswap.config import SkillSwapConfig
from skillswap.directory.models import User
from skillswap.directory.store import UserStore
from skillswap.shared.errors import ErrorCode, ValidationError
from skillswap.shared.skills import contains_skill, normalized_set

from .models import BrowseFilters, BrowsePage, SelectionBranch

logger = logging.getLogger(__name__)


def choose_branch(viewer: Optional[User], filters: BrowseFilters) -> SelectionBranch:
    """Branches are mutually exclusive; anonymous viewers ignore show_all."""
    has_term = filters.skill_term is not None
    if viewer is None:
        return SelectionBranch.ANONYMOUS_TERM if has_term else SelectionBranch.ANONYMOUS_ALL
    if has_term:
        return SelectionBranch.TEACHERS_OF_TERM if filters.show_all else SelectionBranch.MUTUAL_TERM
    return SelectionBranch.EVERYONE if filters.show_all else SelectionBranch.WANTS_MY_SKILLS


def wants_any_of(candidate: User, offered_keys: set) -> bool:
    """Candidate wants at least one of the given (normalized) skills."""
    if not offered_keys:
        return False
    return bool(normalized_set(candidate.skills_wanted) & offered_keys)


def select_candidates(
    candidates: List[User],
    branch: SelectionBranch,
    skill_term: Optional[str],
    viewer: Optional[User],
) -> List[User]:
    """Apply one selection branch. Input order is preserved."""
    if branch in (SelectionBranch.ANONYMOUS_ALL, SelectionBranch.EVERYONE):
        return list(candidates)

    if branch in (SelectionBranch.ANONYMOUS_TERM, SelectionBranch.TEACHERS_OF_TERM):
        return [c for c in candidates if contains_skill(c.skills_offered, skill_term)]

    my_offered = normalized_set(viewer.skills_offered) if viewer else set()

    if branch == SelectionBranch.MUTUAL_TERM:
        return [
            c for c in candidates
            if contains_skill(c.skills_offered, skill_term) and wants_any_of(c, my_offered)
        ]

    # WANTS_MY_SKILLS
    return [c for c in candidates if wants_any_of(c, my_offered)]


def rank_by_rating(users: List[User]) -> List[User]:
    """Rating descending. sorted() is stable, so ties keep store order."""
    return sorted(users, key=lambda u: u.rating, reverse=True)


def paginate(users: List[User], page: int, page_size: int) -> Tuple[List[User], int]:
    """Slice [(page-1)*size, page*size). Out-of-range pages are empty, not errors."""
    start = (page - 1) * page_size
    return users[start:start + page_size], len(users)


class MatchEngine:
    """Browse entry point over a UserStore."""

    def __init__(self, store: UserStore, config: SkillSwapConfig):
        self.store = store
        self.config = config

    def resolve_page_size(self, requested: Optional[int]) -> int:
        if requested is None:
            return self.config.default_page_size
        if requested < 1:
            raise ValidationError(ErrorCode.INVALID_INPUT, "page_size must be >= 1")
        if requested > self.config.max_page_size:
            raise ValidationError(
                ErrorCode.INVALID_INPUT,
                f"page_size must be <= {self.config.max_page_size}",
            )
        return requested

    def browse(self, viewer: Optional[User], filters: BrowseFilters) -> BrowsePage:
        page_size = self.resolve_page_size(filters.page_size)
        if filters.page < 1:
            raise ValidationError(ErrorCode.INVALID_INPUT, "page must be >= 1")

        eligible = self.store.find_public_candidates(
            exclude_id=viewer.id if viewer else None,
            location=filters.location,
            availability_slots=filters.availability_slots,
        )

        branch = choose_branch(viewer, filters)
        selected = select_candidates(eligible, branch, filters.skill_term, viewer)
        ranked = rank_by_rating(selected)
        page_users, total = paginate(ranked, filters.page, page_size)

        logger.info(
            f"Browse branch={branch.value} term={filters.skill_term!r} "
            f"eligible={len(eligible)} total={total} page={filters.page}"
        )

        return BrowsePage(
            users=[u.to_profile(self.config.default_display_rating) for u in page_users],
            total=total,
            page=filters.page,
            page_size=page_size,
            branch=branch,
        )
