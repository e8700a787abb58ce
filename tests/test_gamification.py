"""Tests for the gamification rule tables."""
import pytest

from app.domain.interactive import BadgeRarity, CelebrationType
from app.services.gamification import (
    DAILY_CHALLENGES,
    calculate_points_for_activity,
    challenge_celebration,
    get_badge_for_milestone,
    is_streak_milestone,
    level_for_points,
)


class TestPoints:
    """Test points per activity and levels."""

    @pytest.mark.parametrize("activity,points", [
        ("session_complete", 100),
        ("message_sent", 5),
        ("voice_recording", 20),
        ("profile_complete", 50),
        ("mentor_connect", 25),
        ("daily_login", 10),
        ("streak_maintain", 15),
    ])
    def test_known_activities(self, activity, points):
        assert calculate_points_for_activity(activity) == points

    def test_unknown_activity_is_worth_nothing(self):
        assert calculate_points_for_activity("juggling") == 0

    @pytest.mark.parametrize("points,level", [(0, 1), (999, 1), (1000, 2), (1050, 2), (5000, 6)])
    def test_level_for_points(self, points, level):
        assert level_for_points(points) == level


class TestBadges:
    """Test milestone badges."""

    def test_badge_for_known_milestone(self, fixed_time):
        badge = get_badge_for_milestone("mentor_favorite", earned_at=fixed_time)

        assert badge.id == "mentor_favorite"
        assert badge.name == "Mentor's Favorite"
        assert badge.rarity == BadgeRarity.LEGENDARY
        assert badge.earned_date == fixed_time

    def test_unknown_milestone_grants_nothing(self):
        assert get_badge_for_milestone("moon_landing") is None


class TestStreakMilestones:
    """Test the seven-day streak rule."""

    @pytest.mark.parametrize("previous,current,expected", [
        (6, 7, True),
        (13, 14, True),
        (5, 6, False),
        (7, 7, False),
        (8, 7, False),
        (0, 0, False),
    ])
    def test_is_streak_milestone(self, previous, current, expected):
        assert is_streak_milestone(previous, current) is expected


def test_challenge_celebration():
    challenge = DAILY_CHALLENGES["voice_session"]

    celebration = challenge_celebration(challenge)

    assert celebration.type == CelebrationType.ACHIEVEMENT
    assert celebration.message == "+50 points earned!"
    assert celebration.auto_expires
