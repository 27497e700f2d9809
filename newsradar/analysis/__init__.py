"""Personal relevance: importance scoring, clustering and weekly feed assembly."""

from .clustering import cluster_articles, find_cluster_by_article_id, flatten_clusters
from .importance import (
    IMPORTANCE_THRESHOLD,
    compute_factors,
    filter_by_importance,
    matches_user_interests,
    score_article,
    score_articles,
)
from .weekly_feed import assemble_weeks, week_label, week_start

__all__ = [
    "cluster_articles",
    "find_cluster_by_article_id",
    "flatten_clusters",
    "IMPORTANCE_THRESHOLD",
    "compute_factors",
    "filter_by_importance",
    "matches_user_interests",
    "score_article",
    "score_articles",
    "assemble_weeks",
    "week_label",
    "week_start",
]
