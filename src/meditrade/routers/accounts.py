"""Account routes."""
from fastapi import APIRouter, status
from fastapi.concurrency import run_in_threadpool

from meditrade.deps import AccountServiceDep, CurrentUser
from meditrade.schemas import AccountCreate, AccountOut, HoldingOut

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post("", response_model=AccountOut, status_code=status.HTTP_201_CREATED)
async def register(body: AccountCreate, service: AccountServiceDep) -> AccountOut:
    """Create an account funded with the configured starting balance."""
    account = await run_in_threadpool(service.register, body.name, body.email, body.role)
    return AccountOut.model_validate(account)


@router.get("/me", response_model=AccountOut)
async def get_me(user_id: CurrentUser, service: AccountServiceDep) -> AccountOut:
    account, holdings = await run_in_threadpool(service.get, user_id)
    out = AccountOut.model_validate(account)
    out.holdings = [HoldingOut.model_validate(h) for h in holdings]
    return out
