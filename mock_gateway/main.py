import hashlib
import hmac
import logging
import os
import secrets
import time
from typing import Dict, List

from fastapi import Depends, FastAPI, HTTPException
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from pydantic import BaseModel

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("mock-gateway")

KEY_ID = os.getenv("RAZORPAY_KEY_ID", "rzp_test_key")
KEY_SECRET = os.getenv("RAZORPAY_KEY_SECRET", "change_secret")
SUPPORTED_CURRENCIES = ["INR"]

app = FastAPI(title="Mock Payment Gateway")
basic_auth = HTTPBasic()

# order id -> order body, lives as long as the process
orders: Dict[str, dict] = {}


class OrderCreate(BaseModel):
    amount: int
    currency: str
    receipt: str | None = None
    notes: Dict[str, str] = {}


class SignRequest(BaseModel):
    order_id: str
    payment_id: str


def require_key(credentials: HTTPBasicCredentials = Depends(basic_auth)):
    valid_id = hmac.compare_digest(credentials.username.encode(), KEY_ID.encode())
    valid_secret = hmac.compare_digest(credentials.password.encode(), KEY_SECRET.encode())
    if not (valid_id and valid_secret):
        raise HTTPException(status_code=401, detail="Authentication failed")


@app.post("/v1/orders")
async def create_order(body: OrderCreate, _auth=Depends(require_key)):
    logger.info(
        "Received order amount=%s currency=%s receipt=%s notes=%s",
        body.amount,
        body.currency,
        body.receipt,
        body.notes,
    )
    if body.currency not in SUPPORTED_CURRENCIES:
        logger.warning("Unsupported currency=%s for receipt=%s", body.currency, body.receipt)
        raise HTTPException(status_code=400, detail="The currency provided is invalid")
    if body.amount < 100:
        # Razorpay refuses orders below one rupee.
        raise HTTPException(status_code=400, detail="Order amount less than minimum amount allowed")
    order_id = f"order_{secrets.token_hex(7)}"
    order = {
        "id": order_id,
        "entity": "order",
        "amount": body.amount,
        "amount_paid": 0,
        "amount_due": body.amount,
        "currency": body.currency,
        "receipt": body.receipt,
        "status": "created",
        "notes": body.notes,
        "created_at": int(time.time()),
    }
    orders[order_id] = order
    logger.info("Stored order id=%s amount=%s", order_id, body.amount)
    return order


@app.get("/v1/orders")
async def list_orders(_auth=Depends(require_key)):
    items: List[dict] = list(orders.values())
    logger.info("Listing %s orders", len(items))
    return {"entity": "collection", "count": len(items), "items": items}


@app.post("/v1/payments/sign")
async def sign_payment(body: SignRequest):
    """
    Produce the checkout signature a real gateway would hand the browser after payment.
    """
    if body.order_id not in orders:
        raise HTTPException(status_code=404, detail="order not found")
    message = f"{body.order_id}|{body.payment_id}".encode()
    signature = hmac.new(KEY_SECRET.encode(), message, hashlib.sha256).hexdigest()
    return {
        "razorpay_order_id": body.order_id,
        "razorpay_payment_id": body.payment_id,
        "razorpay_signature": signature,
    }

