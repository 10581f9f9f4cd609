"""Async tasks of the match lifecycle module."""

from __future__ import annotations

import structlog
from celery import shared_task

logger = structlog.get_logger(__name__)


@shared_task(name="matches.expire_pending_matches", ignore_result=True)
def expire_pending_matches() -> int:
    """Periodic expiry sweep, scheduled by Celery beat.

    One invocation handles at most ``MATCH_EXPIRY_BATCH_SIZE`` matches;
    the remainder is picked up on the next tick.
    """
    from modules.core.container import build_match_service

    expired = build_match_service().expire_sweep()
    if expired:
        logger.info("match.expiry_task_completed", expired=expired)
    return expired
