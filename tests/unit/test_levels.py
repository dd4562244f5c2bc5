"""
Unit tests for the XP level curve
"""

import pytest

from afc.services.levels import MAX_LEVEL, calculate_level, level_progress, level_title


@pytest.mark.parametrize("xp, level", [
    (0, 1),
    (99, 1),
    (100, 2),
    (500, 3),
    (950, 4),
    (18999, 19),
    (19000, 20),
    (250000, 20),
])
def test_calculate_level(xp, level):
    assert calculate_level(xp) == level


def test_level_progress_midway():
    progress = level_progress(200)
    assert progress["current"] == 100
    assert progress["next"] == 300
    assert progress["progress"] == pytest.approx(50.0)


def test_level_progress_at_max():
    assert level_progress(50000)["progress"] == 100.0


def test_level_titles():
    assert level_title(1) == "Newcomer"
    assert level_title(MAX_LEVEL) == "Ultimate"
    assert level_title(99) == "Unknown"
