"""
Auto-expire endpoint.

Hit periodically by an external scheduler. Cancels paid orders whose
commit deadline has passed and requests their refunds.
"""
from fastapi import APIRouter, Depends, Request
import logging

from api.dependencies import get_expiry_sweeper, get_settings
from api.responses import crash_response, health_payload, json_response, read_invocation
from core.application.services import ExpirySweeper
from core.domain.errors import OrderLifecycleError
from core.settings import AppSettings


logger = logging.getLogger(__name__)
router = APIRouter()


@router.api_route(
    "/auto-expire-commits",
    methods=["GET", "POST"],
    summary="Expire uncommitted orders",
    description="Cancel and refund paid orders past their commit deadline",
)
async def auto_expire_commits(
    request: Request,
    sweeper: ExpirySweeper = Depends(get_expiry_sweeper),
    settings: AppSettings = Depends(get_settings),
):
    """
    Run one expiry sweep.

    A body of `{"action": "health"}` returns a liveness payload instead.
    """
    invocation = await read_invocation(request)
    if invocation.is_health_check:
        return json_response(health_payload(settings, "auto-expire-commits is healthy"))

    try:
        result = await sweeper.sweep_expired_commits()
    except OrderLifecycleError:
        raise
    except Exception as e:
        logger.error(f"Auto-expire crashed: {e}", exc_info=True)
        return crash_response(e)

    return json_response({
        "success": True,
        "message": f"Processed {result.expired_count} expired order(s)",
        "expired_count": result.expired_count,
        "expired_orders": [o.model_dump(mode="json") for o in result.expired_orders],
        "skipped_count": result.skipped_count,
        "failed_count": result.failed_count,
        "processed_at": result.processed_at.isoformat(),
        "execution_id": result.execution_id,
    })
