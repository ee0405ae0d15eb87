"""Tests for tend.core.date_ideas — the date-night idea picker."""

import random

import pytest

from tend.core.date_ideas import (
    CATEGORY_EMOJIS,
    CATEGORY_LABELS,
    DATE_IDEAS,
    random_date_idea,
)


def test_every_category_has_ten_ideas():
    for category in CATEGORY_LABELS:
        assert len([i for i in DATE_IDEAS if i.category == category]) == 10


def test_every_category_has_an_emoji():
    assert set(CATEGORY_EMOJIS) == set(CATEGORY_LABELS)


@pytest.mark.parametrize("category", ["home", "going-out", "adventure", "quick"])
def test_category_filter(category):
    rng = random.Random(1)
    for _ in range(20):
        assert random_date_idea(rng, category).category == category


def test_no_category_draws_from_everything():
    rng = random.Random(3)
    seen = {random_date_idea(rng).category for _ in range(200)}
    assert seen == set(CATEGORY_LABELS)


def test_same_seed_same_idea():
    assert random_date_idea(random.Random(9), "quick") == random_date_idea(random.Random(9), "quick")


def test_unknown_category_raises():
    with pytest.raises(ValueError, match="Unknown date idea category"):
        random_date_idea(random.Random(0), "fancy")
