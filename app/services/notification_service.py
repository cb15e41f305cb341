# app/services/notification_service.py
"""
Booking notifications — posts a Teams MessageCard to an incoming webhook
after a booking is created or its status changes.

Webhook: settings.TEAMS_WEBHOOK_URL (unset → the card is only logged)
Delivery is best-effort. Nothing here ever raises into the caller; the
committed booking is the source of truth.
"""

import json
import httpx
from app.config import settings
from app.utils.logger import get_logger

logger = get_logger(__name__)

EVENT_CREATED = "created"
EVENT_UPDATED = "updated"

TIME_FORMAT = "%Y-%m-%d %H:%M"
THEME_COLOR = "0076D7"


def build_booking_card(booking, vehicle_name: str, event_type: str = EVENT_CREATED) -> dict:
    """MessageCard payload for one booking event. Times are shown in local time."""
    kind = "Request" if event_type == EVENT_CREATED else "Update"
    return {
        "@type": "MessageCard",
        "@context": "http://schema.org/extensions",
        "themeColor": THEME_COLOR,
        "summary": f"Vehicle Booking {kind}",
        "sections": [{
            "activityTitle": f"Booking {kind} for {vehicle_name}",
            "activitySubtitle": f"Status: {booking.status}",
            "facts": [
                {"name": "Start Time", "value": booking.start_time.strftime(TIME_FORMAT)},
                {"name": "End Time", "value": booking.end_time.strftime(TIME_FORMAT)},
                {"name": "Purpose", "value": booking.purpose},
            ],
            "markdown": True,
        }],
        "potentialAction": [{
            "@type": "OpenUri",
            "name": "View in App",
            "targets": [{"os": "default", "uri": settings.APP_URL}],
        }],
    }


async def notify_booking_change(booking, vehicle_name: str, event_type: str = EVENT_CREATED) -> bool:
    """
    Send the card for a committed booking change.
    Returns True if the webhook accepted it, False otherwise (including "not configured").
    """
    try:
        card = build_booking_card(booking, vehicle_name, event_type)
        webhook_url = settings.TEAMS_WEBHOOK_URL
        if not webhook_url:
            logger.info(f"[NOTIFY] No webhook configured — card not sent: {json.dumps(card)}")
            return False

        async with httpx.AsyncClient(timeout=settings.NOTIFICATION_TIMEOUT_SECONDS) as client:
            response = await client.post(webhook_url, json=card)
        if response.status_code >= 400:
            logger.warning(f"[NOTIFY] Webhook returned HTTP {response.status_code} "
                           f"for booking {booking.id} ({event_type})")
            return False
        logger.info(f"[NOTIFY] Sent {event_type} card for booking {booking.id}")
        return True
    except Exception as e:
        logger.error(f"[NOTIFY] Failed for booking {getattr(booking, 'id', None)}: {e}")
        return False
