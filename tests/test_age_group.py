"""
Tests for AgeGroup ordering and display values.
"""

import pytest

from movie_night_api.app.schemas.age_group import AgeGroup


def test_identifiers_are_stable():
    assert [g.value for g in AgeGroup] == ["preschoolers", "littleKids", "bigKids", "tweens"]
    assert AgeGroup("littleKids") is AgeGroup.LITTLE_KIDS


def test_groups_are_ordered_by_age_not_name():
    assert AgeGroup.PRESCHOOLERS < AgeGroup.LITTLE_KIDS < AgeGroup.BIG_KIDS < AgeGroup.TWEENS
    assert AgeGroup.TWEENS >= AgeGroup.BIG_KIDS
    assert sorted([AgeGroup.TWEENS, AgeGroup.BIG_KIDS, AgeGroup.PRESCHOOLERS]) == [
        AgeGroup.PRESCHOOLERS,
        AgeGroup.BIG_KIDS,
        AgeGroup.TWEENS,
    ]


@pytest.mark.parametrize(
    "group, description",
    [
        (AgeGroup.PRESCHOOLERS, "🧸 Preschoolers (2-4)"),
        (AgeGroup.LITTLE_KIDS, "🎨 Little Kids (5-7)"),
        (AgeGroup.BIG_KIDS, "🚀 Big Kids (8-9)"),
        (AgeGroup.TWEENS, "🎭 Tweens (10-12)"),
    ],
)
def test_description(group, description):
    assert group.description == description