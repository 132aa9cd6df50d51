"""Wallet routes: balance, deposit, withdraw."""
from fastapi import APIRouter
from fastapi.concurrency import run_in_threadpool

from meditrade.deps import CurrentUser, WalletServiceDep
from meditrade.schemas import (AmountRequest, HoldingOut, TransactionOut,
                               TransactionResponse, WalletOut)

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("", response_model=WalletOut)
async def get_wallet(user_id: CurrentUser, service: WalletServiceDep) -> WalletOut:
    balance, holdings, transactions = await run_in_threadpool(service.get_wallet, user_id)
    return WalletOut(
        balance=balance,
        holdings=[HoldingOut.model_validate(h) for h in holdings],
        recent_transactions=[TransactionOut.model_validate(t) for t in transactions],
    )


@router.post("/deposit", response_model=TransactionResponse)
async def deposit(
    body: AmountRequest, user_id: CurrentUser, service: WalletServiceDep
) -> TransactionResponse:
    transaction, balance = await run_in_threadpool(service.deposit, user_id, body.amount)
    return TransactionResponse(
        transaction=TransactionOut.model_validate(transaction), balance=balance
    )


@router.post("/withdraw", response_model=TransactionResponse)
async def withdraw(
    body: AmountRequest, user_id: CurrentUser, service: WalletServiceDep
) -> TransactionResponse:
    transaction, balance = await run_in_threadpool(service.withdraw, user_id, body.amount)
    return TransactionResponse(
        transaction=TransactionOut.model_validate(transaction), balance=balance
    )
