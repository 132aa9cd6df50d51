"""Price alert routes."""
from fastapi import APIRouter, Response, status
from fastapi.concurrency import run_in_threadpool

from meditrade.deps import AlertServiceDep, CurrentUser
from meditrade.schemas import (AlertCheckRequest, AlertCheckResponse,
                               AlertCreate, AlertOut, TriggeredAlert)

router = APIRouter(prefix="/alerts", tags=["alerts"])


@router.get("", response_model=list[AlertOut])
async def list_alerts(user_id: CurrentUser, service: AlertServiceDep) -> list[AlertOut]:
    alerts = await run_in_threadpool(service.list_alerts, user_id)
    return [AlertOut.model_validate(a) for a in alerts]


@router.post("", response_model=AlertOut, status_code=status.HTTP_201_CREATED)
async def create_alert(
    body: AlertCreate, user_id: CurrentUser, service: AlertServiceDep
) -> AlertOut:
    alert = await service.create(
        user_id, body.symbol, body.target_price, body.condition, body.current_price
    )
    return AlertOut.model_validate(alert)


@router.delete("/{alert_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_alert(alert_id: int, user_id: CurrentUser, service: AlertServiceDep) -> Response:
    await run_in_threadpool(service.delete, user_id, alert_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/check", response_model=AlertCheckResponse)
async def check_alerts(
    service: AlertServiceDep, body: AlertCheckRequest | None = None
) -> AlertCheckResponse:
    """Trigger alerts at the given prices, or at live quotes when none are given."""
    prices = None
    if body is not None and body.prices is not None:
        prices = [(p.symbol, p.price) for p in body.prices]
    triggered = await service.check(prices)
    data = [
        TriggeredAlert.model_validate(
            {**AlertOut.model_validate(a).model_dump(), "user_id": a.user_id,
             "current_price": price}
        )
        for a, price in triggered
    ]
    return AlertCheckResponse(triggered_count=len(data), data=data)


@router.get("/triggered", response_model=list[AlertOut])
async def triggered_alerts(user_id: CurrentUser, service: AlertServiceDep) -> list[AlertOut]:
    alerts = await run_in_threadpool(service.list_alerts, user_id, triggered_only=True)
    return [AlertOut.model_validate(a) for a in alerts]
