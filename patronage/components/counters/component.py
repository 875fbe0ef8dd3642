"""
Counter reconciliation - out-of-band repair of denormalised counters.

likesCount and commentsCount are a cache over the like and comment fact
tables. They are moved atomically by the toggles, but a crash between the
fact write and the counter update can leave them off by one. This job
recomputes them from the facts and rewrites only rows that drifted.
"""

from __future__ import annotations

import logging

from patronage.domain.entities import TargetType

from .models import CounterRepair, ReconcileReport, StoredCounters
from .ports import CounterRepoPort

logger = logging.getLogger(__name__)


def find_drift(
    stored: StoredCounters,
    likes: dict,
    comments: dict | None = None,
) -> list[CounterRepair]:
    """Compare one row's counters with the fact counts."""
    repairs = []

    actual_likes = likes.get(stored.target_id, 0)
    if stored.likes_count != actual_likes:
        repairs.append(
            CounterRepair(
                stored.target_type, stored.target_id, "likes_count", stored.likes_count, actual_likes
            )
        )

    if comments is not None and stored.comments_count is not None:
        actual_comments = comments.get(stored.target_id, 0)
        if stored.comments_count != actual_comments:
            repairs.append(
                CounterRepair(
                    stored.target_type,
                    stored.target_id,
                    "comments_count",
                    stored.comments_count,
                    actual_comments,
                )
            )

    return repairs


def reconcile_counters(*, repo: CounterRepoPort, dry_run: bool = False) -> ReconcileReport:
    """
    Recompute post and comment counters from the fact tables.

    Args:
        repo: Counter repository
        dry_run: Report drift without writing

    Returns:
        ReconcileReport listing every repaired field
    """
    post_likes = repo.like_counts(TargetType.POST)
    comment_likes = repo.like_counts(TargetType.COMMENT)
    post_comments = repo.comment_counts()

    posts = repo.stored_post_counters()
    comments = repo.stored_comment_counters()

    repairs: list[CounterRepair] = []
    for row in posts:
        drift = find_drift(row, post_likes, post_comments)
        if drift:
            repairs.extend(drift)
            if not dry_run:
                repo.write_counters(
                    row.target_type,
                    row.target_id,
                    post_likes.get(row.target_id, 0),
                    post_comments.get(row.target_id, 0),
                )

    for row in comments:
        drift = find_drift(row, comment_likes)
        if drift:
            repairs.extend(drift)
            if not dry_run:
                repo.write_counters(
                    row.target_type, row.target_id, comment_likes.get(row.target_id, 0)
                )

    for r in repairs:
        logger.warning(
            "Counter drift on %s %s: %s stored=%d actual=%d",
            r.target_type.value,
            r.target_id,
            r.field,
            r.stored,
            r.actual,
        )

    return ReconcileReport(
        posts_checked=len(posts), comments_checked=len(comments), repairs=repairs
    )


def run(*, repo: CounterRepoPort, dry_run: bool = False) -> ReconcileReport:
    """Main entry point for counter reconciliation."""
    return reconcile_counters(repo=repo, dry_run=dry_run)
