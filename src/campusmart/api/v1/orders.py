"""Order API endpoints."""

from uuid import UUID

from fastapi import APIRouter, Query

from campusmart.api.deps import AdminParticipant, DbSession, RedisServiceDep, TraderParticipant
from campusmart.schemas.order import AssignAdminRequest, OrderListResponse, OrderResponse
from campusmart.services.order_service import OrderService
from campusmart.services.transition_service import TransitionService

router = APIRouter()


@router.get("", response_model=OrderListResponse)
async def list_orders(
    db: DbSession,
    admin: AdminParticipant,
    order_status: str | None = Query(None, alias="status"),
    assigned_admin_id: UUID | None = None,
    unassigned: bool = False,
    skip: int = Query(0, ge=0),
    limit: int = Query(20, ge=1, le=100),
):
    """List orders for admins, filtered by status and assigned admin."""
    service = OrderService(db)
    orders, total = await service.list_orders(
        assigned_admin_id=assigned_admin_id,
        unassigned=unassigned,
        status=order_status,
        skip=skip,
        limit=limit,
    )

    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        total=total,
    )


@router.get("/mine", response_model=OrderListResponse)
async def get_my_orders(
    db: DbSession,
    participant: TraderParticipant,
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=100),
):
    """Get the caller's orders as buyer or seller."""
    service = OrderService(db)
    orders, total = await service.get_participant_orders(
        participant_id=participant.participant_id,
        role=participant.role,
        skip=skip,
        limit=limit,
    )

    return OrderListResponse(
        orders=[OrderResponse.model_validate(o) for o in orders],
        total=total,
    )


@router.put("/{order_id}/assign-admin", response_model=OrderResponse)
async def assign_admin(
    order_id: UUID,
    assign_data: AssignAdminRequest,
    db: DbSession,
    admin: AdminParticipant,
    redis_service: RedisServiceDep,
):
    """Assign the logistics admin whose schedules the order's parties may book."""
    service = TransitionService(db, redis_service)
    order = await service.assign_admin_to_order(
        admin_id=admin.participant_id,
        order_id=order_id,
        assigned_admin_id=assign_data.assigned_admin_id,
    )
    return OrderResponse.model_validate(order)
