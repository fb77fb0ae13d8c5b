"""
Statistics derived from weigh-ins.

This is the single place where loss, loss percentage, averages and
rankings are computed. Everything is a pure function over already-loaded
models; nothing here touches storage.

Loss percentage is signed: a participant who gained weight shows a
negative percentage in every view, charts included.
"""

from typing import Iterable, List, Sequence, Tuple

from ..models import (
    Participant,
    WeighIn,
    UserStats,
    ProgressPoint,
    SeriesPoint,
    ParticipantSeries,
    CompetitionSummary,
)
from .. import config

SORT_BY_PERCENTAGE = "percentage"
SORT_BY_TOTAL = "total"
SORT_KEYS = (SORT_BY_PERCENTAGE, SORT_BY_TOTAL)


def loss_percentage(start_weight: float, current_weight: float) -> float:
    """(start - current) / start * 100. Negative when weight was gained."""
    if start_weight <= 0:
        return 0.0
    return (start_weight - current_weight) / start_weight * 100


def _ordered(weigh_ins: Iterable[WeighIn]) -> List[WeighIn]:
    return sorted(weigh_ins, key=lambda w: w.week_number)


def compute_user_stats(participant: Participant, weigh_ins: Iterable[WeighIn]) -> UserStats:
    """
    Compute statistics for one participant.

    Args:
        participant: The participant, carrying the start weight
        weigh_ins: Their weigh-ins, in any order

    Returns:
        UserStats where current weight is the latest week's weight (the start
        weight when nothing was submitted) and average weekly loss is 0 when
        there are no weigh-ins
    """
    ordered = _ordered(weigh_ins)
    start = participant.start_weight
    current = ordered[-1].weight if ordered else start

    # Weights carry two decimals, so the difference does too
    total_loss = round(start - current, 2)
    weeks = len(ordered)

    return UserStats(
        user_id=participant.user_id,
        display_name=participant.name,
        start_weight=start,
        current_weight=current,
        total_weight_loss=total_loss,
        total_weight_loss_percentage=loss_percentage(start, current),
        average_weekly_loss=total_loss / weeks if weeks else 0.0,
        weeks_participated=weeks,
        total_weigh_ins=weeks,
        last_weigh_in=ordered[-1].date if ordered else None,
    )


def progress_series(participant: Participant, weigh_ins: Iterable[WeighIn]) -> List[ProgressPoint]:
    """
    Build a participant's progress series.

    Week 0 is the start weight. Each weigh-in adds a point whose weekly
    change is the previous weight minus this one (positive means a loss).
    """
    start = participant.start_weight
    points = [
        ProgressPoint(
            week=0,
            weight=start,
            weight_loss=0.0,
            weight_loss_percentage=0.0,
            weekly_change=0.0,
        )
    ]

    previous = start
    for weigh_in in _ordered(weigh_ins):
        points.append(ProgressPoint(
            week=weigh_in.week_number,
            weight=weigh_in.weight,
            weight_loss=round(start - weigh_in.weight, 2),
            weight_loss_percentage=loss_percentage(start, weigh_in.weight),
            weekly_change=round(previous - weigh_in.weight, 2),
        ))
        previous = weigh_in.weight

    return points


def participant_series(participant: Participant, weigh_ins: Iterable[WeighIn]) -> ParticipantSeries:
    """Loss percentage per submitted week, without absolute weights."""
    return ParticipantSeries(
        user_id=participant.user_id,
        name=participant.name,
        data=[
            SeriesPoint(
                week=w.week_number,
                weight_loss_percentage=loss_percentage(participant.start_weight, w.weight),
            )
            for w in _ordered(weigh_ins)
        ],
    )


def weekly_pivot(series: Sequence[ParticipantSeries]) -> List[dict]:
    """
    Regroup participant series by week.

    Returns one row per competition week: {"week": n, <userId>: pct, ...}.
    Columns are keyed by user id since display names may repeat; the
    names travel with the series. Participants without a weigh-in that
    week are left out of that row.
    """
    rows = []
    for week in range(1, config.COMPETITION_WEEKS + 1):
        row = {"week": week}
        for entry in series:
            for point in entry.data:
                if point.week == week:
                    row[entry.user_id] = point.weight_loss_percentage
                    break
        rows.append(row)
    return rows


def _sort_key(sort_by: str):
    if sort_by == SORT_BY_TOTAL:
        return lambda s: (-s.total_weight_loss, -s.total_weight_loss_percentage, s.display_name.lower())
    if sort_by == SORT_BY_PERCENTAGE:
        return lambda s: (-s.total_weight_loss_percentage, -s.total_weight_loss, s.display_name.lower())
    raise ValueError(f"Unknown sort key: {sort_by}. Valid options: {', '.join(SORT_KEYS)}")


def rank_stats(stats: Iterable[UserStats], sort_by: str = SORT_BY_PERCENTAGE) -> List[Tuple[int, UserStats]]:
    """
    Rank participants, best first.

    Args:
        stats: Statistics of the participants to rank
        sort_by: "percentage" (loss percentage) or "total" (total loss);
                 ties fall back to the other metric, then the name

    Returns:
        List of (rank, stats) with 1-based ranks
    """
    ordered = sorted(stats, key=_sort_key(sort_by))
    return [(index + 1, s) for index, s in enumerate(ordered)]


def summarize(stats: Sequence[UserStats], limit: int = 5) -> CompetitionSummary:
    """Aggregate statistics over all participants of a competition."""
    count = len(stats)
    total_loss = sum(s.total_weight_loss for s in stats)
    total_pct = sum(s.total_weight_loss_percentage for s in stats)
    total_weeks = sum(s.weeks_participated for s in stats)

    top_performers = [s for _, s in rank_stats(stats, SORT_BY_PERCENTAGE)[:limit]]
    most_consistent = sorted(
        stats,
        key=lambda s: (-s.weeks_participated, s.display_name.lower())
    )[:limit]

    return CompetitionSummary(
        total_participants=count,
        participants_losing_weight=sum(1 for s in stats if s.total_weight_loss > 0),
        total_weigh_ins=sum(s.total_weigh_ins for s in stats),
        total_weight_loss=round(total_loss, 2),
        average_weight_loss=total_loss / count if count else 0.0,
        average_weight_loss_percentage=total_pct / count if count else 0.0,
        average_weeks_participated=total_weeks / count if count else 0.0,
        top_performers=top_performers,
        most_consistent=most_consistent,
    )
