"""Notification API routes for sellers"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Depends
from pydantic import BaseModel

from ..core.container import Services, get_services

router = APIRouter(prefix="/api/notifications", tags=["Notifications"])


class MarkReadRequest(BaseModel):
    """Mark one notification read, or all of them when notification_id is omitted"""
    notification_id: Optional[str] = None


@router.get("/{recipient_id}")
async def get_notifications(
    recipient_id: str,
    services: Services = Depends(get_services),
):
    """Notifications for a seller, newest first"""
    center = services.notifications
    return {
        "notifications": center.get_notifications(recipient_id),
        "unread_count": center.unread_count(recipient_id),
    }


@router.post("/{recipient_id}/read")
async def mark_notifications_read(
    recipient_id: str,
    request: MarkReadRequest,
    services: Services = Depends(get_services),
):
    center = services.notifications
    if request.notification_id is None:
        center.mark_all_as_read(recipient_id)
    elif not center.mark_as_read(recipient_id, request.notification_id):
        raise HTTPException(status_code=404, detail="Notification not found")
    return {"unread_count": center.unread_count(recipient_id)}
