"""FastAPI endpoints for accounts, packages and shipping methods."""

import json
from datetime import date, datetime

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import StreamingResponse

from tracking.api.dependencies import bearer_token, tracking_service
from tracking.api.schemas import (
    AccountResponse,
    CancelPackageRequest,
    ChangeStatusRequest,
    CreatePackageRequest,
    CreateShippingMethodRequest,
    HistoryEntryResponse,
    PackageResponse,
    RegisterAccountRequest,
    ShippingMethodResponse,
    SummaryResponse,
    UpdateAccountRequest,
    UpdateProfileRequest,
    UpdateRateRequest,
)
from tracking.notifier import event_payload
from tracking.package.queries import NEWEST_FIRST, PackageFilter
from tracking.service import DASHBOARD_DAYS, TrackingService

account_router = APIRouter(prefix="/accounts", tags=["accounts"])
package_router = APIRouter(prefix="/packages", tags=["packages"])
shipping_method_router = APIRouter(prefix="/shipping-methods", tags=["shipping-methods"])

# Seconds a stream waits for an event before sending a keep-alive comment
STREAM_POLL_SECONDS = 15.0


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------
@account_router.post("", status_code=201, response_model=AccountResponse)
async def register_account(
    body: RegisterAccountRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> AccountResponse:
    account = service.register(token, name=body.name, email=body.email, address=body.address)
    return AccountResponse.from_account(account)


@account_router.get("/me", response_model=AccountResponse)
async def get_me(
    token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> AccountResponse:
    return AccountResponse.from_account(service.resolve(token))


@account_router.put("/me", response_model=AccountResponse)
async def update_me(
    body: UpdateProfileRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> AccountResponse:
    return AccountResponse.from_account(service.update_profile(token, name=body.name, address=body.address))


@account_router.get("", response_model=list[AccountResponse])
async def list_accounts(
    token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> list[AccountResponse]:
    return [AccountResponse.from_account(account) for account in service.list_accounts(token)]


@account_router.put("/{account_id}", response_model=AccountResponse)
async def update_account(
    account_id: str,
    body: UpdateAccountRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> AccountResponse:
    account = service.update_account(token, account_id, email=body.email, role=body.role, address=body.address)
    return AccountResponse.from_account(account)


@account_router.delete("/{account_id}", status_code=204)
async def delete_account(
    account_id: str, token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> Response:
    service.delete_account(token, account_id)
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------
@package_router.post("", status_code=201, response_model=PackageResponse)
async def create_package(
    body: CreatePackageRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> PackageResponse:
    package = service.create_package(
        token,
        recipient_name=body.recipient_name,
        recipient_address=body.recipient_address,
        weight=body.weight,
        method_id=body.method_id,
    )
    return PackageResponse.from_package(package)


@package_router.get("", response_model=list[PackageResponse])
async def list_packages(
    status: str | None = None,
    search: str | None = None,
    date_from: date | datetime | None = None,
    date_to: date | datetime | None = None,
    order: str = NEWEST_FIRST,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> list[PackageResponse]:
    flt = PackageFilter(status=status, search=search, date_from=date_from, date_to=date_to, order=order)
    return [PackageResponse.from_package(package) for package in service.list_packages(token, flt)]


@package_router.get("/summary", response_model=SummaryResponse)
async def dashboard_summary(
    days: int = Query(DASHBOARD_DAYS),
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> SummaryResponse:
    return SummaryResponse(**service.dashboard_summary(token, days=days))


@package_router.get("/events")
async def package_events(
    request: Request,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> StreamingResponse:
    """Server-Sent Events stream of package changes visible to the caller."""
    subscription = service.subscribe(token)

    async def stream():
        try:
            yield ": subscribed\n\n"
            while not subscription.closed:
                if await request.is_disconnected():
                    break
                event = await run_in_threadpool(subscription.get, STREAM_POLL_SECONDS)
                if event is None:
                    yield ": keep-alive\n\n"
                    continue
                payload = event_payload(event)
                yield f"event: {payload['type']}\ndata: {json.dumps(payload)}\n\n"
        finally:
            subscription.close()

    return StreamingResponse(stream(), media_type="text/event-stream", headers={"Cache-Control": "no-cache"})


@package_router.get("/{package_id}", response_model=PackageResponse)
async def get_package(
    package_id: str, token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> PackageResponse:
    return PackageResponse.from_package(service.get_package(token, package_id))


@package_router.get("/{package_id}/history", response_model=list[HistoryEntryResponse])
async def package_history(
    package_id: str, token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> list[HistoryEntryResponse]:
    return [HistoryEntryResponse(**entry) for entry in service.package_history(token, package_id)]


@package_router.put("/{package_id}/cancel", response_model=PackageResponse)
async def cancel_package(
    package_id: str,
    body: CancelPackageRequest | None = None,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> PackageResponse:
    expected = body.expected_status if body is not None else None
    return PackageResponse.from_package(service.cancel_package(token, package_id, expected_status=expected))


@package_router.put("/{package_id}/status", response_model=PackageResponse)
async def set_package_status(
    package_id: str,
    body: ChangeStatusRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> PackageResponse:
    package = service.set_package_status(token, package_id, body.status, expected_status=body.expected_status)
    return PackageResponse.from_package(package)


# ---------------------------------------------------------------------------
# Shipping methods
# ---------------------------------------------------------------------------
@shipping_method_router.get("", response_model=list[ShippingMethodResponse])
async def list_shipping_methods(
    token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> list[ShippingMethodResponse]:
    return [ShippingMethodResponse.from_method(method) for method in service.list_shipping_methods(token)]


@shipping_method_router.post("", status_code=201, response_model=ShippingMethodResponse)
async def create_shipping_method(
    body: CreateShippingMethodRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> ShippingMethodResponse:
    return ShippingMethodResponse.from_method(service.create_shipping_method(token, body.label, body.rate))


@shipping_method_router.put("/{method_id}/rate", response_model=ShippingMethodResponse)
async def update_shipping_rate(
    method_id: str,
    body: UpdateRateRequest,
    token: str = Depends(bearer_token),
    service: TrackingService = Depends(tracking_service),
) -> ShippingMethodResponse:
    return ShippingMethodResponse.from_method(service.update_shipping_rate(token, method_id, body.rate))


@shipping_method_router.delete("/{method_id}", status_code=204)
async def remove_shipping_method(
    method_id: str, token: str = Depends(bearer_token), service: TrackingService = Depends(tracking_service)
) -> Response:
    service.remove_shipping_method(token, method_id)
    return Response(status_code=204)
