from fastapi import APIRouter

from tindago_ledger.interfaces.http.routers import (
    admin_commission,
    admin_payouts,
    admin_transactions,
    admin_wallets,
    stores,
    webhooks,
)


def create_api_router(prefix: str = "") -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(admin_commission.router, prefix="/admin/commission", tags=["commission"])
    router.include_router(admin_transactions.router, prefix="/admin/transactions", tags=["ledger"])
    router.include_router(admin_wallets.router, prefix="/admin/wallets", tags=["wallets"])
    router.include_router(admin_payouts.router, prefix="/admin/payouts", tags=["payouts"])
    router.include_router(stores.router, prefix="/stores", tags=["stores"])
    router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
    return router


__all__ = [
    "create_api_router",
]
