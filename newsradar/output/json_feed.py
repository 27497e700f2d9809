from __future__ import annotations

import json
from typing import List, Sequence

from ..models import NewsCluster, ScoredArticle, TimelinePage, WeekBucket
from ..storage.article_store import article_to_dict


def _scored_to_dict(item: ScoredArticle) -> dict:
    data = article_to_dict(item.article, include_body=False)
    data.pop("body", None)
    data["score"] = item.score
    return data


def cluster_to_dict(cluster: NewsCluster) -> dict:
    return {
        "id": cluster.id,
        "representative": _scored_to_dict(cluster.representative),
        "related": [_scored_to_dict(r) for r in cluster.related],
        "cluster_size": cluster.cluster_size,
    }


def weeks_to_dicts(weeks: Sequence[WeekBucket]) -> List[dict]:
    return [
        {
            "week_start": w.week_start.isoformat(),
            "week_end": w.week_end.isoformat(),
            "label": w.label,
            "clusters": [cluster_to_dict(c) for c in w.clusters],
            "total_items": w.total_items,
        }
        for w in weeks
    ]


def timeline_to_dict(page: TimelinePage) -> dict:
    items = []
    for art in page.items:
        data = article_to_dict(art, include_body=False)
        data.pop("body", None)
        items.append(data)
    return {
        "items": items,
        "has_more": page.has_more,
        "next_cursor": page.next_cursor.isoformat() if page.next_cursor else None,
    }


def to_json_str(payload: object) -> str:
    return json.dumps(payload, ensure_ascii=False, indent=2)
