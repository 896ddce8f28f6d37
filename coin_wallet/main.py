from typing import Optional

import uvicorn
from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.docs import get_swagger_ui_html
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from coin_wallet import models
from coin_wallet.clients.razorpay_client import RazorpayClient, razorpay_client
from coin_wallet.config import WithdrawalStatus, settings
from coin_wallet.database import engine, get_db
from coin_wallet.errors import WalletError
from coin_wallet.logging_config import get_logger
from coin_wallet.payouts import generate_payout_csv
from coin_wallet.schemas.app_schemas import (
    CreateOrderRequest,
    CreateOrderResponse,
    ManualApproveRequest,
    ManualPaymentRequest,
    SetBalanceRequest,
    VerifyPaymentRequest,
    WithdrawalUpdateRequest,
    WithdrawRequest,
)
from coin_wallet.security import require_admin_token
from coin_wallet.services import ManualPaymentService, PaymentService, WalletService, WithdrawalService
from coin_wallet.store import PlayerStore, SqlAlchemyPlayerStore


logger = get_logger(__name__)

models.Base.metadata.create_all(bind=engine)
app = FastAPI(title="Coin Wallet")
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)


def get_store(db: Session = Depends(get_db)) -> PlayerStore:
    return SqlAlchemyPlayerStore(db)


def get_gateway_client() -> RazorpayClient:
    return razorpay_client


def get_wallet_service(store: PlayerStore = Depends(get_store)) -> WalletService:
    return WalletService(store)


def get_payment_service(
    store: PlayerStore = Depends(get_store),
    client: RazorpayClient = Depends(get_gateway_client),
) -> PaymentService:
    return PaymentService(store, client)


def get_withdrawal_service(store: PlayerStore = Depends(get_store)) -> WithdrawalService:
    return WithdrawalService(store)


def get_manual_payment_service(store: PlayerStore = Depends(get_store)) -> ManualPaymentService:
    return ManualPaymentService(store)


@app.exception_handler(WalletError)
async def wallet_error_handler(request: Request, exc: WalletError):
    if exc.status_code >= 500:
        logger.error("Request failed path=%s error=%s", request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"success": False, "message": exc.message})


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    logger.warning("Rejected malformed request path=%s errors=%s", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"success": False, "message": "Invalid request body"})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error path=%s", request.url.path)
    return JSONResponse(status_code=500, content={"success": False, "message": "Server error"})


@app.get("/api/wallet")
async def get_wallet(player: Optional[str] = None, wallet: WalletService = Depends(get_wallet_service)):
    return {"success": True, "balance": wallet.get_balance(player)}


@app.post("/api/wallet/set-balance")
async def set_wallet_balance(request: SetBalanceRequest, wallet: WalletService = Depends(get_wallet_service)):
    balance = wallet.set_balance(request.player, request.balance)
    return {"success": True, "balance": balance}


@app.post("/api/create-order", response_model=CreateOrderResponse)
async def create_order(request: CreateOrderRequest, payments: PaymentService = Depends(get_payment_service)):
    order = await payments.create_order(request.player, request.coins)
    return {"success": True, **order}


@app.post("/api/payment/verify")
async def verify_payment(request: VerifyPaymentRequest, payments: PaymentService = Depends(get_payment_service)):
    balance = payments.verify_payment(
        request.razorpay_order_id,
        request.razorpay_payment_id,
        request.razorpay_signature,
        request.player,
        request.coins,
    )
    return {"success": True, "newBalance": balance}


@app.post("/api/withdraw-request")
async def withdraw_request(request: WithdrawRequest, withdrawals: WithdrawalService = Depends(get_withdrawal_service)):
    result = withdrawals.request_withdrawal(request.player, request.upiId, request.coins)
    return {"success": True, **result}


@app.get("/api/withdraw-history")
async def withdraw_history(player: Optional[str] = None, withdrawals: WithdrawalService = Depends(get_withdrawal_service)):
    return {"success": True, "history": withdrawals.list_history(player)}


@app.get("/api/admin/withdrawals")
async def admin_list_withdrawals(
    _auth=Depends(require_admin_token),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
):
    return {"success": True, "withdrawals": withdrawals.admin_list_all()}


@app.post("/api/admin/withdrawals/update")
async def admin_update_withdrawal(
    request: WithdrawalUpdateRequest,
    _auth=Depends(require_admin_token),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
):
    history = withdrawals.admin_update(request.player, request.index, request.status, request.txnId, request.note)
    return {"success": True, "history": history}


@app.get("/api/admin/withdrawals/export")
async def admin_export_withdrawals(
    status: Optional[WithdrawalStatus] = None,
    _auth=Depends(require_admin_token),
    withdrawals: WithdrawalService = Depends(get_withdrawal_service),
):
    csv_text, row_count = generate_payout_csv(withdrawals.admin_list_all(), status.value if status else None)
    return Response(
        content=csv_text,
        media_type="text/csv",
        headers={
            "Content-Disposition": 'attachment; filename="payouts.csv"',
            "X-Record-Count": str(row_count),
        },
    )


@app.post("/api/manual-add")
async def manual_add(request: ManualPaymentRequest, manual: ManualPaymentService = Depends(get_manual_payment_service)):
    manual.submit_claim(request.player, request.amount, request.txnId)
    return {"success": True, "message": "Payment submitted for review"}


@app.get("/api/admin/manual-payments")
async def admin_list_manual_payments(
    _auth=Depends(require_admin_token),
    manual: ManualPaymentService = Depends(get_manual_payment_service),
):
    return {"success": True, "payments": manual.admin_list_claims()}


@app.post("/api/admin/manual-approve")
async def admin_manual_approve(
    request: ManualApproveRequest,
    _auth=Depends(require_admin_token),
    manual: ManualPaymentService = Depends(get_manual_payment_service),
):
    return {"success": True, "newBalance": manual.admin_approve(request.index)}


@app.get("/swagger", include_in_schema=False)
async def swagger_ui():
    return get_swagger_ui_html(openapi_url=str(app.openapi_url), title="Coin Wallet - Swagger UI")


@app.get("/health")
async def health():
    return {"status": "ok"}


def run():
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    run()
