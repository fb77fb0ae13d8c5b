"""Tests for demo data generation."""

import pytest
import random

from challenge.errors import NotFoundError, PermissionDeniedError
from challenge.services import StatsService, TestDataService, WeighInService
from challenge.services.test_data_service import TEST_USERS, simulate_weights


class TestSimulateWeights:
    """Tests for the weight generator."""

    def test_twelve_weeks(self):
        assert len(simulate_weights(200.0, random.Random(1))) == 12

    def test_never_below_eighty_percent(self):
        for seed in range(20):
            weights = simulate_weights(100.0, random.Random(seed))
            assert min(weights) >= 80.0

    def test_rounded_to_one_decimal(self):
        for weight in simulate_weights(200.0, random.Random(3)):
            assert weight == round(weight, 1)

    def test_weekly_trend_is_downward(self):
        weights = simulate_weights(250.0, random.Random(7))
        assert weights[-1] <= 250.0 - 12 * 0.25

    def test_seed_is_deterministic(self):
        assert simulate_weights(200.0, random.Random(42)) == simulate_weights(200.0, random.Random(42))


class TestGeneration:
    """Tests for generating and clearing demo data."""

    def test_generate_test_users(self, db_fixture, competition, admin_session):
        result = TestDataService(db_fixture, seed=1).generate_test_users(admin_session, 2025)

        assert result['participants'] == len(TEST_USERS)
        assert result['weigh_ins'] == len(TEST_USERS) * 12

        participants = db_fixture.get_participants(2025)
        assert len(participants) == 10
        assert all(p['isTestUser'] for p in participants)
        assert len(db_fixture.get_weigh_ins(2025, 'test-user-1')) == 12

    def test_generated_data_feeds_leaderboard(self, db_fixture, competition, admin_session):
        TestDataService(db_fixture, seed=5).generate_test_users(admin_session, 2025)

        entries = StatsService(db_fixture).get_leaderboard(admin_session, 2025)

        assert len(entries) == 10
        assert all(e.total_weight_loss > 0 for e in entries)

    def test_generate_requires_admin(self, db_fixture, competition, alice_session):
        with pytest.raises(PermissionDeniedError):
            TestDataService(db_fixture).generate_test_users(alice_session, 2025)

    def test_generate_unknown_year(self, db_fixture, admin_session):
        with pytest.raises(NotFoundError):
            TestDataService(db_fixture).generate_test_users(admin_session, 1999)

    def test_generate_for_existing_users(self, db_fixture, seeded_users, competition, admin_session):
        result = TestDataService(db_fixture, seed=2).generate_for_existing_users(admin_session, 2025)

        assert result['participants'] == 3
        assert result['weigh_ins'] == 36
        alice = db_fixture.get_participant(2025, 'alice-1')
        assert 200.0 <= alice['startWeight'] <= 250.0

    def test_clear_test_data(self, db_fixture, competition, admin_session):
        service = TestDataService(db_fixture, seed=1)
        service.generate_test_users(admin_session, 2025)

        assert service.clear_test_data(admin_session, 2025) == 10
        assert db_fixture.get_participants(2025) == []
        assert db_fixture.get_weigh_ins(2025, 'test-user-1') == []

    def test_clear_test_users_keeps_real_participants(self, db_fixture, competition, admin_session, alice_session):
        WeighInService(db_fixture).join_competition(alice_session, 2025, 200.0)
        service = TestDataService(db_fixture, seed=1)
        service.generate_test_users(admin_session, 2025)

        assert service.clear_test_users(admin_session) == 10
        remaining = db_fixture.get_participants(2025)
        assert [p['userId'] for p in remaining] == ['alice-1']
