from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from ..models import NewsCluster, ScoredArticle
from ..processors.similarity import similarity

CLUSTER_SIMILARITY_THRESHOLD = 0.4


def clustering_order(items: Iterable[ScoredArticle]) -> List[ScoredArticle]:
    """Score descending, newest first among equal scores."""
    return sorted(items, key=lambda s: (s.score, s.article.published_at.timestamp()), reverse=True)


def cluster_articles(
    items: Sequence[ScoredArticle], *, threshold: float = CLUSTER_SIMILARITY_THRESHOLD
) -> List[NewsCluster]:
    """Greedy single pass in the given order.

    Each article joins the cluster whose representative title is most similar,
    provided that similarity is strictly above ``threshold``; otherwise it opens a
    new cluster as its representative.
    """
    clusters: List[NewsCluster] = []
    for item in items:
        best: Optional[NewsCluster] = None
        best_sim = threshold
        for cluster in clusters:
            sim = similarity(cluster.representative.article.title, item.article.title)
            if sim > best_sim:
                best, best_sim = cluster, sim
        if best is None:
            clusters.append(NewsCluster(representative=item))
        else:
            best.related.append(item)
    return clusters


def flatten_clusters(clusters: Iterable[NewsCluster]) -> List[ScoredArticle]:
    return [member for cluster in clusters for member in cluster.members]


def find_cluster_by_article_id(clusters: Iterable[NewsCluster], article_id: str) -> Optional[NewsCluster]:
    for cluster in clusters:
        if any(m.article.id == article_id for m in cluster.members):
            return cluster
    return None
