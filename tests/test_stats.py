"""Tests for the statistics functions."""

import pytest
from datetime import date

from challenge.models import Participant, WeighIn
from challenge.services import stats


def _participant(name='Alice', start=220.0, user_id=None):
    return Participant(user_id=user_id or name.lower(), name=name, start_weight=start)


def _weigh_ins(*weights):
    return [
        WeighIn(week_number=week, weight=weight, date=date(2025, 1, 6 + 7 * (week - 1)) if week < 4 else None)
        for week, weight in enumerate(weights, start=1)
    ]


class TestLossPercentage:
    """Tests for loss percentage."""

    @pytest.mark.parametrize("start,current", [
        (220.0, 215.2),
        (100.0, 100.0),
        (180.0, 150.0),
        (95.5, 101.25),
        (300.0, 310.0),
    ])
    def test_formula(self, start, current):
        """(start - current) / start * 100 for losses and gains alike."""
        expected = (start - current) / start * 100
        assert stats.loss_percentage(start, current) == pytest.approx(expected)

    def test_weight_gain_is_negative(self):
        assert stats.loss_percentage(200.0, 210.0) == pytest.approx(-5.0)

    def test_zero_start_weight(self):
        assert stats.loss_percentage(0, 100.0) == 0.0


class TestUserStats:
    """Tests for per-participant statistics."""

    def test_reference_example(self):
        """Start 220 and weeks 218.5, 216.0, 215.2."""
        result = stats.compute_user_stats(_participant(), _weigh_ins(218.5, 216.0, 215.2))

        assert result.total_weight_loss == pytest.approx(4.8)
        assert result.total_weight_loss_percentage == pytest.approx(2.18, abs=0.01)
        assert result.weeks_participated == 3
        assert result.total_weigh_ins == 3
        assert result.average_weekly_loss == pytest.approx(1.6)
        assert result.current_weight == 215.2
        assert result.last_weigh_in == date(2025, 1, 20)

    def test_no_weigh_ins(self):
        """Without weigh-ins the current weight is the start weight and averages are 0."""
        result = stats.compute_user_stats(_participant(start=180.0), [])

        assert result.current_weight == 180.0
        assert result.total_weight_loss == 0.0
        assert result.total_weight_loss_percentage == 0.0
        assert result.average_weekly_loss == 0.0
        assert result.weeks_participated == 0
        assert result.last_weigh_in is None

    def test_average_weekly_loss(self):
        result = stats.compute_user_stats(_participant(start=200.0), _weigh_ins(199.0, 197.0, 196.0, 194.0))
        assert result.average_weekly_loss == pytest.approx(result.total_weight_loss / 4)

    def test_unordered_input_uses_latest_week(self):
        weigh_ins = list(reversed(_weigh_ins(218.0, 217.0, 216.0)))
        result = stats.compute_user_stats(_participant(), weigh_ins)
        assert result.current_weight == 216.0

    def test_weight_gain(self):
        result = stats.compute_user_stats(_participant(start=150.0), _weigh_ins(152.0, 153.0))
        assert result.total_weight_loss == pytest.approx(-3.0)
        assert result.total_weight_loss_percentage == pytest.approx(-2.0)


class TestProgressSeries:
    """Tests for the personal progress series."""

    def test_starts_at_week_zero(self):
        points = stats.progress_series(_participant(), _weigh_ins(218.5, 216.0))

        assert [p.week for p in points] == [0, 1, 2]
        assert points[0].weight == 220.0
        assert points[0].weekly_change == 0.0

    def test_weekly_change_from_previous_weight(self):
        points = stats.progress_series(_participant(), _weigh_ins(218.5, 216.0, 217.0))

        assert points[1].weekly_change == pytest.approx(1.5)
        assert points[2].weekly_change == pytest.approx(2.5)
        assert points[3].weekly_change == pytest.approx(-1.0)
        assert points[3].weight_loss == pytest.approx(3.0)


class TestSeries:
    """Tests for leaderboard chart data."""

    def test_participant_series_has_no_weights(self):
        series = stats.participant_series(_participant(), _weigh_ins(218.5))
        dumped = series.model_dump(by_alias=True)

        assert dumped['data'] == [{'week': 1, 'weightLossPercentage': pytest.approx(1.5 / 220 * 100)}]
        assert 'weight' not in dumped['data'][0]

    def test_weekly_pivot(self):
        series = [
            stats.participant_series(_participant('Alice'), _weigh_ins(218.0, 216.0)),
            stats.participant_series(_participant('Bob', 200.0), _weigh_ins(198.0)),
        ]
        rows = stats.weekly_pivot(series)

        assert len(rows) == 12
        assert rows[0]['week'] == 1
        assert set(rows[0]) == {'week', 'alice', 'bob'}
        assert set(rows[1]) == {'week', 'alice'}
        assert rows[11] == {'week': 12}

    def test_weekly_pivot_keeps_duplicate_names_apart(self):
        series = [
            stats.participant_series(_participant('Alex', 200.0, user_id='alex-1'), _weigh_ins(198.0)),
            stats.participant_series(_participant('Alex', 200.0, user_id='alex-2'), _weigh_ins(196.0)),
            stats.participant_series(_participant('week', 100.0, user_id='u-week'), _weigh_ins(98.0)),
        ]

        row = stats.weekly_pivot(series)[0]

        assert row == {
            'week': 1,
            'alex-1': pytest.approx(1.0),
            'alex-2': pytest.approx(2.0),
            'u-week': pytest.approx(2.0),
        }


class TestRanking:
    """Tests for leaderboard ranking."""

    def _stats(self):
        return [
            stats.compute_user_stats(_participant('Light', 120.0), _weigh_ins(114.0)),   # 6 lost, 5%
            stats.compute_user_stats(_participant('Heavy', 300.0), _weigh_ins(288.0)),   # 12 lost, 4%
            stats.compute_user_stats(_participant('Gainer', 200.0), _weigh_ins(204.0)),  # -4, -2%
        ]

    def test_rank_by_percentage(self):
        ranked = stats.rank_stats(self._stats(), stats.SORT_BY_PERCENTAGE)
        assert [(rank, s.display_name) for rank, s in ranked] == [(1, 'Light'), (2, 'Heavy'), (3, 'Gainer')]

    def test_rank_by_total(self):
        ranked = stats.rank_stats(self._stats(), stats.SORT_BY_TOTAL)
        assert [s.display_name for _, s in ranked] == ['Heavy', 'Light', 'Gainer']

    def test_tie_falls_back_to_name(self):
        tied = [
            stats.compute_user_stats(_participant('Zoe', 200.0), _weigh_ins(190.0)),
            stats.compute_user_stats(_participant('Ann', 200.0), _weigh_ins(190.0)),
        ]
        ranked = stats.rank_stats(tied)
        assert [s.display_name for _, s in ranked] == ['Ann', 'Zoe']

    def test_unknown_sort_key(self):
        with pytest.raises(ValueError):
            stats.rank_stats(self._stats(), 'weight')


class TestSummary:
    """Tests for the competition summary."""

    def test_summary(self):
        all_stats = [
            stats.compute_user_stats(_participant('A', 200.0), _weigh_ins(196.0, 194.0)),
            stats.compute_user_stats(_participant('B', 100.0), _weigh_ins(101.0)),
            stats.compute_user_stats(_participant('C', 150.0), []),
        ]
        summary = stats.summarize(all_stats)

        assert summary.total_participants == 3
        assert summary.participants_losing_weight == 1
        assert summary.total_weigh_ins == 3
        assert summary.total_weight_loss == pytest.approx(5.0)
        assert summary.average_weeks_participated == pytest.approx(1.0)
        assert summary.top_performers[0].display_name == 'A'
        assert [s.display_name for s in summary.most_consistent] == ['A', 'B', 'C']

    def test_empty_summary(self):
        summary = stats.summarize([])
        assert summary.total_participants == 0
        assert summary.average_weight_loss == 0.0
        assert summary.top_performers == []
