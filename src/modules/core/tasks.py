"""Asynchronous tasks of the core module."""

from __future__ import annotations

from typing import Dict

import structlog
from celery import shared_task
from django.conf import settings
from django.db import transaction

from modules.core.models import OutboxEvent
from shared.infrastructure.bus import event_bus

logger = structlog.get_logger(__name__)


@shared_task(name="core.relay_outbox_events")
def relay_outbox_events(batch_size: int | None = None) -> Dict[str, int]:
    """Dispatch pending outbox rows to the in-process event bus.

    Rows are processed oldest first and locked with ``SKIP LOCKED`` so
    two workers never relay the same row.  A handler error marks only its
    own row as failed; the rest of the batch continues and the row is
    retried on a later run until ``OUTBOX_MAX_RETRIES`` is reached.
    """
    limit = batch_size or settings.OUTBOX_RELAY_BATCH_SIZE
    published = failed = 0

    with transaction.atomic():
        rows = list(
            OutboxEvent.objects.select_for_update(skip_locked=True).relayable(
                settings.OUTBOX_MAX_RETRIES
            )[:limit]
        )
        for row in rows:
            log = logger.bind(
                outbox_id=str(row.id),
                event_type=row.event_type,
                aggregate_id=row.aggregate_id,
            )
            try:
                event_bus.publish(row.to_domain_event())
            except Exception as exc:  # recorded on the row, retried next run
                row.mark_failed(str(exc))
                log.warning(
                    "outbox.relay_failed", error=str(exc), retry_count=row.retry_count
                )
                failed += 1
                continue
            row.mark_published()
            published += 1

    logger.info("outbox.relay_completed", published=published, failed=failed)
    return {"published": published, "failed": failed}
