from pydantic import BaseModel
from typing import Optional, Any

# Field values stay loosely typed: each service decides what counts as a
# valid amount or index and answers with its own error message.

class SetBalanceRequest(BaseModel):
    player: Optional[str] = None
    balance: Any = None

class CreateOrderRequest(BaseModel):
    player: Optional[str] = None
    coins: Any = None

class CreateOrderResponse(BaseModel):
    success: bool = True
    orderId: str
    amount: int
    currency: str
    key: str

class VerifyPaymentRequest(BaseModel):
    player: Optional[str] = None
    coins: Any = None
    razorpay_order_id: Optional[str] = None
    razorpay_payment_id: Optional[str] = None
    razorpay_signature: Optional[str] = None

class WithdrawRequest(BaseModel):
    player: Optional[str] = None
    upiId: Optional[str] = None
    coins: Any = None

class WithdrawalUpdateRequest(BaseModel):
    player: Optional[str] = None
    index: Any = None
    status: Optional[str] = None
    txnId: Optional[str] = None
    note: Optional[str] = None

class ManualPaymentRequest(BaseModel):
    player: Optional[str] = None
    amount: Any = None
    txnId: Optional[str] = None

class ManualApproveRequest(BaseModel):
    index: Any = None
