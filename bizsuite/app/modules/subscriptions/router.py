from __future__ import annotations

import uuid
from datetime import date

from fastapi import APIRouter, Depends, Query, Request

from bizsuite.app.core.auth import AuthRequired, get_deps
from bizsuite.app.core.errors import MockApiError
from bizsuite.app.dependencies import MockDependencies
from bizsuite.app.modules.crud import (
    ResourceSpec,
    add_crud_routes,
    load_entity,
    now_iso,
    read_body,
    save_entity,
    to_wire,
)
from bizsuite.models.subscriptions import (
    CreateSubscriptionAssignmentDto,
    CreateSubscriptionDto,
    PauseSubscriptionDto,
    ResumeSubscriptionDto,
    RevokeSubscriptionAssignmentDto,
    Subscription,
    SubscriptionAssignment,
    SubscriptionsFilterParams,
    UpdateSubscriptionDto,
)

ASSIGNMENT_ENTITY = "subscription_assignment"


def _assignments(deps: MockDependencies, subscription_id: str) -> list[SubscriptionAssignment]:
    return [
        SubscriptionAssignment.model_validate(r)
        for r in deps.records.list_records(ASSIGNMENT_ENTITY)
        if r.get("subscriptionId") == subscription_id
    ]


def _delete_assignments(deps: MockDependencies, subscription: Subscription) -> None:
    for a in _assignments(deps, subscription.id):
        deps.records.delete(ASSIGNMENT_ENTITY, a.id)


SPEC = ResourceSpec(
    entity="subscription",
    label="Subscription",
    model=Subscription,
    create_model=CreateSubscriptionDto,
    update_model=UpdateSubscriptionDto,
    filter_model=SubscriptionsFilterParams,
    search_fields=("name", "vendor", "plan_name", "category"),
    date_field="renewal_date",
    display_field="name",
    after_delete=_delete_assignments,
)


def create_router() -> APIRouter:
    router = APIRouter(prefix="/subscriptions")

    @router.post("/{record_id}/pause")
    async def pause(record_id: str, request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)):
        sub = load_entity(deps, SPEC, record_id)
        body = PauseSubscriptionDto.model_validate(await read_body(request))
        if sub.status != "active":
            raise MockApiError(400, f"Only active subscriptions can be paused (status: {sub.status})")
        paused_on = (body.paused_on or date.today()).isoformat()
        return to_wire(save_entity(deps, SPEC, sub, {"status": "paused", "paused_on": paused_on}, actor))

    @router.post("/{record_id}/resume")
    async def resume(
        record_id: str, request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)
    ):
        sub = load_entity(deps, SPEC, record_id)
        body = ResumeSubscriptionDto.model_validate(await read_body(request))
        if sub.status != "paused":
            raise MockApiError(400, f"Only paused subscriptions can be resumed (status: {sub.status})")
        resumed_on = (body.resumed_on or date.today()).isoformat()
        return to_wire(save_entity(deps, SPEC, sub, {"status": "active", "resumed_on": resumed_on}, actor))

    @router.get("/{record_id}/assignments")
    async def list_assignments(
        record_id: str,
        _: AuthRequired,
        include_revoked: bool = Query(default=False, alias="includeRevoked"),
        deps: MockDependencies = Depends(get_deps),
    ):
        load_entity(deps, SPEC, record_id)
        rows = _assignments(deps, record_id)
        if not include_revoked:
            rows = [a for a in rows if a.revoked_on is None]
        return [a.model_dump(mode="json", by_alias=True) for a in rows]

    @router.post("/{record_id}/assignments", status_code=201)
    async def assign(
        record_id: str, request: Request, actor: AuthRequired, deps: MockDependencies = Depends(get_deps)
    ):
        sub = load_entity(deps, SPEC, record_id)
        dto = CreateSubscriptionAssignmentDto.model_validate(await read_body(request))
        if dto.target_type == "employee" and not dto.employee_id:
            raise MockApiError(400, "employeeId is required for employee assignments")
        if sub.seats_total is not None and (sub.seats_used or 0) >= sub.seats_total:
            raise MockApiError(409, "No seats left on this subscription")
        assignment = SubscriptionAssignment(
            id=str(uuid.uuid4()),
            subscription_id=sub.id,
            target_type=dto.target_type,
            company_id=dto.company_id,
            employee_id=dto.employee_id,
            seat_identifier=dto.seat_identifier,
            role=dto.role,
            assigned_on=dto.assigned_on or date.today(),
            notes=dto.notes,
        )
        record = assignment.model_dump(mode="json", by_alias=True)
        record["createdAt"] = now_iso()
        deps.records.insert(ASSIGNMENT_ENTITY, record)
        save_entity(deps, SPEC, sub, {"seats_used": (sub.seats_used or 0) + 1}, actor)
        return assignment.model_dump(mode="json", by_alias=True)

    @router.post("/{record_id}/assignments/{assignment_id}/revoke")
    async def revoke(
        record_id: str,
        assignment_id: str,
        request: Request,
        actor: AuthRequired,
        deps: MockDependencies = Depends(get_deps),
    ):
        sub = load_entity(deps, SPEC, record_id)
        raw = deps.records.get(ASSIGNMENT_ENTITY, assignment_id)
        if raw is None or raw.get("subscriptionId") != record_id:
            raise MockApiError(404, f"Assignment with id {assignment_id} not found")
        dto = RevokeSubscriptionAssignmentDto.model_validate(await read_body(request))
        assignment = SubscriptionAssignment.model_validate(raw)
        if assignment.revoked_on is not None:
            raise MockApiError(400, "Assignment is already revoked")
        revoked = assignment.model_copy(
            update={"revoked_on": dto.revoked_on or date.today(), "notes": dto.notes or assignment.notes}
        )
        deps.records.replace(ASSIGNMENT_ENTITY, {**raw, **revoked.model_dump(mode="json", by_alias=True)})
        save_entity(deps, SPEC, sub, {"seats_used": max((sub.seats_used or 0) - 1, 0)}, actor)
        return {"ok": True}

    return add_crud_routes(router, SPEC)
