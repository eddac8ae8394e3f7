"""
Commit-to-sale endpoint.

Called by the seller's client when they confirm a paid order.
"""
from fastapi import APIRouter, Depends, status
import logging

from api.dependencies import get_commitment_service
from api.responses import crash_response, json_response
from core.application.dtos import CommitToSaleRequest
from core.application.services import CommitmentService
from core.domain.errors import OrderLifecycleError


logger = logging.getLogger(__name__)
router = APIRouter()


@router.post(
    "/commit-to-sale",
    status_code=status.HTTP_200_OK,
    summary="Commit to a paid order",
    description="Seller confirms they will fulfil a paid order before its deadline",
)
async def commit_to_sale(
    request: CommitToSaleRequest,
    service: CommitmentService = Depends(get_commitment_service),
):
    """
    Commit a seller to a paid order.

    **Body:**
    - `orderId`: Order to commit
    - `sellerId`: Seller that owns the order

    **Returns:**
    - `{success, message, order: {id, status, committed_at}}`
    """
    try:
        result = await service.commit_to_sale(request.order_id, request.seller_id)
    except OrderLifecycleError:
        raise
    except Exception as e:
        logger.error(f"Commit to sale crashed for {request.order_id}: {e}", exc_info=True)
        return crash_response(e)

    order = result.order
    return json_response({
        "success": True,
        "message": "Order committed successfully",
        "order": {
            "id": order.id,
            "status": order.status,
            "committed_at": order.committed_at.isoformat(),
        },
    })
