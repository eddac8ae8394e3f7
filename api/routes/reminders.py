"""
Order reminders endpoint.

Hit periodically by an external scheduler. Sends commit reminders to
sellers and collection reminders to buyers.
"""
from fastapi import APIRouter, Depends, Request
import logging

from api.dependencies import get_reminder_dispatcher, get_settings
from api.responses import crash_response, health_payload, json_response, read_invocation
from core.application.services import ReminderDispatcher
from core.domain.errors import OrderLifecycleError
from core.settings import AppSettings


logger = logging.getLogger(__name__)
router = APIRouter()


@router.api_route(
    "/process-order-reminders",
    methods=["GET", "POST"],
    summary="Send deadline reminders",
    description="Remind sellers to commit and buyers to collect before deadlines pass",
)
async def process_order_reminders(
    request: Request,
    dispatcher: ReminderDispatcher = Depends(get_reminder_dispatcher),
    settings: AppSettings = Depends(get_settings),
):
    """
    Run one reminder pass.

    A body of `{"action": "health"}` returns a liveness payload instead.
    """
    invocation = await read_invocation(request)
    if invocation.is_health_check:
        return json_response(health_payload(settings, "process-order-reminders is healthy"))

    try:
        result = await dispatcher.dispatch_reminders()
    except OrderLifecycleError:
        raise
    except Exception as e:
        logger.error(f"Reminder processing crashed: {e}", exc_info=True)
        return crash_response(e)

    return json_response({
        "success": True,
        "message": f"Sent {result.total_reminders} reminder(s)",
        "total_reminders": result.total_reminders,
        "reminders": [r.model_dump(mode="json") for r in result.reminders],
        "failed_count": result.failed_count,
        "processed_at": result.processed_at.isoformat(),
        "execution_id": result.execution_id,
    })
