from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import List, Optional, Sequence

from ..models import NewsCluster, ScoredArticle, UserInterests, WeekBucket
from ..utils.logging import get_logger
from .clustering import cluster_articles, clustering_order
from .importance import IMPORTANCE_THRESHOLD, score_article

logger = get_logger("nr.analysis.weekly_feed")

WEEKS = 12
_END_OF_DAY = time(23, 59, 59, 999000)


def _to_local(moment: datetime, tz: Optional[tzinfo]) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(tz)


def _at(day: date, clock: time, tz: Optional[tzinfo]) -> datetime:
    if tz is None:
        # Naive -> system local time, with the offset valid on that day
        return datetime.combine(day, clock).astimezone()
    return datetime.combine(day, clock, tzinfo=tz)


def week_start(moment: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Monday 00:00:00.000 of the week containing ``moment``."""
    local = _to_local(moment, tz)
    monday = local.date() - timedelta(days=local.weekday())
    return _at(monday, time.min, tz)


def week_label(start: datetime) -> str:
    """``"1/20-26"``, or ``"12/30-1/5"`` when the week spans two months."""
    end = start + timedelta(days=6)
    if start.month == end.month:
        return f"{start.month}/{start.day}-{end.day}"
    return f"{start.month}/{start.day}-{end.month}/{end.day}"


def empty_weeks(now: Optional[datetime] = None, tz: Optional[tzinfo] = None, weeks: int = WEEKS) -> List[WeekBucket]:
    """Most recent first, anchored on the Monday of ``now``'s week."""
    current = week_start(now or datetime.now(timezone.utc), tz)
    buckets: List[WeekBucket] = []
    for i in range(weeks):
        start_day = current.date() - timedelta(days=7 * i)
        start = _at(start_day, time.min, tz)
        end = _at(start_day + timedelta(days=6), _END_OF_DAY, tz)
        next_start = _at(start_day + timedelta(days=7), time.min, tz)
        buckets.append(WeekBucket(week_start=start, week_end=end, next_week_start=next_start, label=week_label(start)))
    return buckets


def _rescore(cluster: NewsCluster, interests: UserInterests) -> NewsCluster:
    size = cluster.cluster_size
    rescored = [ScoredArticle(m.article, score_article(m.article, interests, size)) for m in cluster.members]
    return NewsCluster(representative=rescored[0], related=rescored[1:])


def assemble_weeks(
    scored: Sequence[ScoredArticle],
    interests: UserInterests,
    *,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
    rescore_clusters: bool = False,
) -> List[WeekBucket]:
    """Group scored articles into 12 weekly buckets of clusters.

    With keyword or company interests only articles scoring at least 40 are kept;
    category-only profiles keep everything. Scores stay the ``cluster_size=1``
    values unless ``rescore_clusters`` is set, in which case members are rescored
    with their final cluster size (without gating again).
    """
    buckets = empty_weeks(now, tz)
    if not interests.categories:
        return buckets

    if interests.has_specific_interests:
        included = [s for s in scored if s.score >= IMPORTANCE_THRESHOLD]
    else:
        included = list(scored)

    per_week: List[List[ScoredArticle]] = [[] for _ in buckets]
    for item in included:
        published = item.article.published_at
        if published.tzinfo is None:
            published = published.replace(tzinfo=timezone.utc)
        for i, bucket in enumerate(buckets):
            if bucket.contains(published):
                per_week[i].append(item)
                break

    for bucket, items in zip(buckets, per_week):
        clusters = cluster_articles(clustering_order(items))
        if rescore_clusters:
            clusters = [_rescore(c, interests) for c in clusters]
        bucket.clusters = clusters

    logger.debug(
        "Assembled %d weeks: %d of %d articles included",
        len(buckets),
        sum(b.total_items for b in buckets),
        len(scored),
    )
    return buckets
