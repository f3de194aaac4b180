"""
Dummy User Seeder Tests

Runs scripts/seed_dummy_users.py against the in-memory store.
"""

import os
import random
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "scripts"))

from seed_dummy_users import seed_users

from skillswap.config import SKILL_CATALOGUE, SkillSwapConfig
from skillswap.directory.store import InMemoryUserStore
from skillswap.shared.skills import skills_intersect


@pytest.fixture
def store() -> InMemoryUserStore:
    return InMemoryUserStore()


def test_seeds_requested_count(store):
    created = seed_users(store, SkillSwapConfig(), 5, rng=random.Random(7))

    assert [u.email for u in created] == [f"demo{i}@example.com" for i in range(1, 6)]
    for user in created:
        assert 2 <= len(user.skills_offered) <= 5
        assert all(skill in SKILL_CATALOGUE for skill in user.skills_offered)
        assert not skills_intersect(user.skills_offered, user.skills_wanted)
        assert 3.5 <= user.rating <= 4.2
        assert user.total_ratings == 0
        assert any(user.availability.model_dump().values())


def test_rerun_skips_existing(store):
    seed_users(store, SkillSwapConfig(), 3, rng=random.Random(1))

    created = seed_users(store, SkillSwapConfig(), 4, rng=random.Random(2))

    assert [u.email for u in created] == ["demo4@example.com"]
    assert len(store.list_all()) == 4
