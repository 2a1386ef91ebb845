"""Shared persistence building blocks.

- ``BaseModel``: UUIDv7 primary key + created_at / updated_at timestamps.
- ``OutboxEvent``: one row per domain event, written in the transaction
  that produced the event and relayed later by ``core.relay_outbox_events``.

UUIDv7 keys are time-ordered, so ``ORDER BY id`` roughly follows creation
order and the index stays append-friendly.
"""

from __future__ import annotations

import uuid6
from django.db import models
from django.utils import timezone

from shared.domain.events import DomainEvent


class BaseModel(models.Model):
    """Abstract base with UUIDv7 PK and timestamp bookkeeping."""

    id = models.UUIDField(primary_key=True, default=uuid6.uuid7, editable=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        abstract = True

    def save(self, *args, **kwargs) -> None:
        # auto_now is skipped by Django when update_fields omits it
        update_fields = kwargs.get("update_fields")
        if update_fields is not None and "updated_at" not in update_fields:
            kwargs["update_fields"] = [*update_fields, "updated_at"]
        super().save(*args, **kwargs)


# ---------------------------------------------------------------------------
# Outbox
# ---------------------------------------------------------------------------


class EventStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    PUBLISHED = "PUBLISHED", "Published"
    FAILED = "FAILED", "Failed"


class OutboxEventQuerySet(models.QuerySet):
    def relayable(self, max_retries: int) -> OutboxEventQuerySet:
        """Unpublished rows that still have retries left, oldest first."""
        return self.filter(
            status__in=[EventStatus.PENDING, EventStatus.FAILED],
            retry_count__lt=max_retries,
        ).order_by("created_at", "id")


class OutboxEvent(BaseModel):
    """Serialized domain event awaiting (or done with) relay.

    A row is ``PENDING`` until the relay hands it to the event bus; it
    then becomes ``PUBLISHED``.  A failed dispatch marks it ``FAILED`` and
    bumps ``retry_count``; once ``OUTBOX_MAX_RETRIES`` is reached the row
    is left for manual inspection.
    """

    event_type = models.CharField(max_length=100)
    payload = models.JSONField()
    aggregate_id = models.CharField(max_length=255)
    topic = models.CharField(max_length=100)
    status = models.CharField(
        max_length=20,
        choices=EventStatus.choices,
        default=EventStatus.PENDING,
    )
    processed_at = models.DateTimeField(null=True, blank=True, default=None)
    error_message = models.TextField(blank=True, default="")
    retry_count = models.PositiveIntegerField(default=0)

    objects = OutboxEventQuerySet.as_manager()

    class Meta:
        db_table = "outbox_events"
        ordering = ["created_at"]
        indexes = [
            models.Index(fields=["aggregate_id"], name="outbox_aggregate_id_idx"),
            models.Index(
                fields=["status", "created_at"], name="outbox_status_created_idx"
            ),
        ]

    @classmethod
    def from_domain_event(cls, event: DomainEvent, topic: str) -> OutboxEvent:
        """Unsaved row for ``event``; callers batch these with ``bulk_create``."""
        return cls(
            event_type=event.event_name,
            aggregate_id=str(event.aggregate_id),
            payload=event.to_payload(),
            topic=topic,
        )

    def to_domain_event(self) -> DomainEvent:
        return DomainEvent.from_payload(self.event_type, self.payload)

    def mark_published(self) -> None:
        self.status = EventStatus.PUBLISHED
        self.processed_at = timezone.now()
        self.error_message = ""
        self.save(update_fields=["status", "processed_at", "error_message"])

    def mark_failed(self, error: str) -> None:
        self.status = EventStatus.FAILED
        self.error_message = error
        self.retry_count += 1
        self.save(update_fields=["status", "error_message", "retry_count"])

    def __str__(self) -> str:
        return f"{self.event_type} [{self.status}] ({self.aggregate_id})"
