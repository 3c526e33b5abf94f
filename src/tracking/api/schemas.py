"""Pydantic request/response schemas for the tracking API."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

# --- Request Schemas ---


class RegisterAccountRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [{"name": "Jane Doe", "email": "jane.doe@example.com", "address": "1 Main St, Springfield"}]
        }
    }

    name: str = Field(..., max_length=200)
    email: str = Field(..., max_length=254)
    address: str | None = None


class UpdateProfileRequest(BaseModel):
    name: str | None = Field(None, max_length=200)
    address: str | None = None


class UpdateAccountRequest(BaseModel):
    email: str | None = Field(None, max_length=254)
    role: str | None = Field(None, max_length=20)
    address: str | None = None


class CreatePackageRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "recipient_name": "John Smith",
                    "recipient_address": "42 Harbour Rd, Portsmouth",
                    "weight": 2.5,
                    "method_id": "b1c5...",
                }
            ]
        }
    }

    recipient_name: str = Field(..., max_length=200)
    recipient_address: str
    weight: float = Field(..., gt=0, allow_inf_nan=False)
    method_id: str


class ChangeStatusRequest(BaseModel):
    model_config = {"json_schema_extra": {"examples": [{"status": "InTransit", "expected_status": "PickedUp"}]}}

    status: str
    expected_status: str | None = None


class CancelPackageRequest(BaseModel):
    expected_status: str | None = None


class CreateShippingMethodRequest(BaseModel):
    label: str = Field(..., max_length=50)
    rate: float = Field(..., ge=0, allow_inf_nan=False)


class UpdateRateRequest(BaseModel):
    rate: float = Field(..., ge=0, allow_inf_nan=False)


# --- Response Schemas ---


class AccountResponse(BaseModel):
    id: str
    external_id: str
    name: str
    email: str
    address: str | None = None
    role: str
    registered_at: datetime | None = None

    @classmethod
    def from_account(cls, account) -> AccountResponse:
        return cls(
            id=str(account.id),
            external_id=account.external_id,
            name=account.name,
            email=account.email_address,
            address=account.address,
            role=account.role,
            registered_at=account.registered_at,
        )


class PackageResponse(BaseModel):
    id: str
    owner_id: str
    recipient_name: str
    recipient_address: str
    weight: float
    method_id: str
    cost: float
    status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_package(cls, package) -> PackageResponse:
        return cls(
            id=str(package.id),
            owner_id=str(package.owner_id),
            recipient_name=package.recipient_name,
            recipient_address=package.recipient_address,
            weight=package.weight,
            method_id=str(package.method_id),
            cost=package.cost,
            status=package.status,
            created_at=package.created_at,
            updated_at=package.updated_at,
        )


class HistoryEntryResponse(BaseModel):
    status: str
    previous_status: str | None = None
    changed_by: str | None = None
    changed_at: datetime | None = None


class SummaryResponse(BaseModel):
    days: int
    total: int
    pending: int


class ShippingMethodResponse(BaseModel):
    id: str
    label: str
    rate: float

    @classmethod
    def from_method(cls, method) -> ShippingMethodResponse:
        return cls(id=str(method.id), label=method.label, rate=method.rate)
