"""
Notification API Endpoints.

Immediate sends, queueing and queue draining. Delivery failures are
reported through the per-channel flags, never as HTTP errors.
"""

import logging
from typing import Optional, Union

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from app.api.dependencies import get_notification_service
from app.core.notifications import (
    Channel,
    NotificationKind,
    NotificationPayload,
    NotificationService,
    Priority,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["Notifications"])


class NotificationRequest(BaseModel):
    """Notification to send or queue."""

    kind: NotificationKind = Field(
        ...,
        description="Notification kind selecting the templates",
        examples=["APPOINTMENT_REMINDER"],
    )
    recipient_phone: Optional[str] = Field(
        default=None,
        max_length=32,
        examples=["9876543210"],
    )
    recipient_email: Optional[str] = Field(
        default=None,
        max_length=255,
        examples=["patient@example.com"],
    )
    message: Optional[str] = Field(
        default=None,
        max_length=1600,
        description="Replaces the rendered SMS text when non-empty",
    )
    subject: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Replaces the rendered email subject when non-empty",
    )
    data: dict[str, Union[str, int, float, bool]] = Field(
        default_factory=dict,
        description="Template placeholder values",
        examples=[{"doctorName": "Rao", "date": "2025-01-10", "time": "10:00"}],
    )
    priority: Priority = Priority.NORMAL
    channels: Optional[list[Channel]] = Field(
        default=None,
        description="Channels to use on /send; defaults to sms and email. Queued sends always use the defaults.",
    )

    def to_payload(self) -> NotificationPayload:
        return NotificationPayload(
            kind=self.kind,
            recipient_phone=self.recipient_phone,
            recipient_email=self.recipient_email,
            message=self.message,
            subject=self.subject,
            data=dict(self.data),
            priority=self.priority,
        )


class DeliveryResponse(BaseModel):
    """Per-channel delivery flags."""
    sms_sent: bool
    email_sent: bool
    whatsapp_sent: bool


class QueuedResponse(BaseModel):
    """Queue acknowledgement."""
    queued: bool
    pending: int


class DrainResponse(BaseModel):
    """Result of a queue drain request."""
    processed: int
    pending: int


@router.post(
    "/send",
    response_model=DeliveryResponse,
    summary="Send a notification now",
)
async def send_notification(
    request: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
) -> DeliveryResponse:
    result = await service.send(request.to_payload(), channels=request.channels)
    return DeliveryResponse(**result.to_dict())


@router.post(
    "/queue",
    response_model=QueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Queue a notification for later delivery",
)
async def queue_notification(
    request: NotificationRequest,
    service: NotificationService = Depends(get_notification_service),
) -> QueuedResponse:
    service.queue(request.to_payload())
    return QueuedResponse(queued=True, pending=service.pending)


@router.post(
    "/queue/process",
    response_model=DrainResponse,
    summary="Drain the notification queue",
    description="Returns immediately with processed=0 if a drain is already running.",
)
async def process_queue(
    service: NotificationService = Depends(get_notification_service),
) -> DrainResponse:
    processed = await service.process_queue()
    return DrainResponse(processed=processed, pending=service.pending)
