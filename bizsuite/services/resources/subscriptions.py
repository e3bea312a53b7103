from __future__ import annotations

from datetime import date

from bizsuite.models.subscriptions import (
    CreateSubscriptionAssignmentDto,
    PauseSubscriptionDto,
    ResumeSubscriptionDto,
    RevokeSubscriptionAssignmentDto,
    Subscription,
    SubscriptionAssignment,
)
from bizsuite.services.resources.base import ResourceService


class SubscriptionService(ResourceService[Subscription]):
    entity_name = "subscription"
    path = "/api/subscriptions"
    model = Subscription

    def pause(self, id: str, paused_on: date | None = None) -> Subscription:
        return self._one(self._action(id, "pause", PauseSubscriptionDto(paused_on=paused_on)))

    def resume(self, id: str, resumed_on: date | None = None) -> Subscription:
        return self._one(self._action(id, "resume", ResumeSubscriptionDto(resumed_on=resumed_on)))

    def get_assignments(self, id: str, include_revoked: bool = False) -> list[SubscriptionAssignment]:
        items = self._http.get_list(
            self.item_path(id, "assignments"),
            params={"includeRevoked": include_revoked},
            context="subscription assignments",
        )
        return [SubscriptionAssignment.model_validate(item) for item in items]

    def assign(self, id: str, dto: CreateSubscriptionAssignmentDto) -> SubscriptionAssignment:
        payload = self._http.post_json(self.item_path(id, "assignments"), body=dto)
        return SubscriptionAssignment.model_validate(payload)

    def revoke_assignment(
        self, id: str, assignment_id: str, dto: RevokeSubscriptionAssignmentDto | None = None
    ) -> None:
        self._http.post_json(
            self.item_path(id, "assignments", assignment_id, "revoke"),
            body=dto or RevokeSubscriptionAssignmentDto(),
        )
