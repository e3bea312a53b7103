from __future__ import annotations

from datetime import date
from typing import Literal, Optional

from pydantic import Field

from bizsuite.models.common import ApiModel, CompanyFilterParams, EntityModel

AssignmentTarget = Literal["employee", "company"]


class Subscription(EntityModel):
    name: str
    vendor: Optional[str] = None
    plan_name: Optional[str] = None
    category: Optional[str] = None
    status: str = "active"
    start_date: Optional[date] = None
    renewal_date: Optional[date] = None
    renewal_period: Optional[str] = None
    seats_total: Optional[int] = None
    seats_used: Optional[int] = None
    cost_per_period: Optional[float] = None
    cost_per_seat: Optional[float] = None
    currency: Optional[str] = None
    auto_renew: Optional[bool] = None
    url: Optional[str] = None
    notes: Optional[str] = None
    paused_on: Optional[date] = None
    resumed_on: Optional[date] = None
    cancelled_on: Optional[date] = None


class CreateSubscriptionDto(ApiModel):
    company_id: str
    name: str = Field(min_length=1)
    vendor: Optional[str] = None
    plan_name: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = "active"
    start_date: Optional[date] = None
    renewal_date: Optional[date] = None
    renewal_period: Optional[str] = None
    seats_total: Optional[int] = Field(default=None, ge=0)
    seats_used: Optional[int] = Field(default=None, ge=0)
    cost_per_period: Optional[float] = None
    cost_per_seat: Optional[float] = None
    currency: Optional[str] = None
    auto_renew: Optional[bool] = None
    url: Optional[str] = None
    notes: Optional[str] = None


class UpdateSubscriptionDto(ApiModel):
    name: Optional[str] = None
    vendor: Optional[str] = None
    plan_name: Optional[str] = None
    category: Optional[str] = None
    status: Optional[str] = None
    start_date: Optional[date] = None
    renewal_date: Optional[date] = None
    renewal_period: Optional[str] = None
    seats_total: Optional[int] = Field(default=None, ge=0)
    seats_used: Optional[int] = Field(default=None, ge=0)
    cost_per_period: Optional[float] = None
    cost_per_seat: Optional[float] = None
    currency: Optional[str] = None
    auto_renew: Optional[bool] = None
    url: Optional[str] = None
    notes: Optional[str] = None


class PauseSubscriptionDto(ApiModel):
    paused_on: Optional[date] = None


class ResumeSubscriptionDto(ApiModel):
    resumed_on: Optional[date] = None


class SubscriptionAssignment(ApiModel):
    id: str
    subscription_id: str
    target_type: AssignmentTarget
    company_id: str
    employee_id: Optional[str] = None
    seat_identifier: Optional[str] = None
    role: Optional[str] = None
    assigned_on: date
    revoked_on: Optional[date] = None
    notes: Optional[str] = None


class CreateSubscriptionAssignmentDto(ApiModel):
    target_type: AssignmentTarget
    company_id: str
    employee_id: Optional[str] = None
    seat_identifier: Optional[str] = None
    role: Optional[str] = None
    assigned_on: Optional[date] = None
    notes: Optional[str] = None


class RevokeSubscriptionAssignmentDto(ApiModel):
    revoked_on: Optional[date] = None
    notes: Optional[str] = None


class SubscriptionsFilterParams(CompanyFilterParams):
    status: Optional[str] = None
    category: Optional[str] = None
    vendor: Optional[str] = None
