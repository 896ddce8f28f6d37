from typing import Any

from coin_wallet.clients.razorpay_client import RazorpayClient
from coin_wallet.config import settings
from coin_wallet.contracts.contracts import GatewayOrderRequest
from coin_wallet.errors import GatewayError, InvalidInput, ServerError
from coin_wallet.helpers import coins_in_range, coins_to_subunits, normalize_player, parse_int, parse_number
from coin_wallet.logging_config import get_logger
from coin_wallet.security import validate_payment_signature
from coin_wallet.store import PlayerStore


logger = get_logger(__name__)


class PaymentService:
    """
    Coin purchases through the payment gateway: order creation, then
    signature verification of the completed payment, which credits the coins.
    """

    def __init__(self, store: PlayerStore, client: RazorpayClient, key_secret: str | None = None) -> None:
        self.store = store
        self.client = client
        self.key_secret = key_secret if key_secret is not None else settings.razorpay_key_secret

    async def create_order(self, player: Any, coins: Any) -> dict:
        coins_value = parse_number(coins)
        if coins_value is None or coins_value <= 0 or not coins_in_range(coins_value):
            raise InvalidInput("Invalid coins amount")
        if not coins_in_range(coins_to_subunits(coins_value)):
            raise InvalidInput("Invalid coins amount")
        name = normalize_player(player)
        order_request = GatewayOrderRequest.from_coins(name, coins_value)
        try:
            order = await self.client.create_order(order_request)
        except GatewayError as exc:
            logger.error("Gateway order creation failed player=%s coins=%s error=%s", name, coins_value, exc)
            raise ServerError("Server error creating order") from exc
        logger.info(
            "Created gateway order orderId=%s player=%s coins=%s amount=%s",
            order.id,
            name,
            coins_value,
            order.amount,
        )
        return {
            "orderId": order.id,
            "amount": order.amount,
            "currency": order.currency,
            "key": self.client.key_id,
        }

    def verify_payment(self, order_id: Any, payment_id: Any, signature: Any, player: Any, coins: Any) -> int:
        if not order_id or not payment_id or not signature:
            raise InvalidInput("Missing payment details")
        order_id, payment_id = str(order_id), str(payment_id)
        validate_payment_signature(order_id, payment_id, str(signature), self.key_secret)

        name = normalize_player(player)
        coins_num = max(parse_int(coins) or 0, 0)
        with self.store.locks.hold("order", order_id):
            with self.store.transaction(name) as store:
                processed = store.get_processed_payment(order_id)
                if processed is not None:
                    if processed.payment_id != payment_id:
                        raise InvalidInput("Payment already processed for this order")
                    logger.warning(
                        "Ignoring replayed payment orderId=%s paymentId=%s player=%s",
                        order_id,
                        payment_id,
                        name,
                    )
                    return store.resolve(name).balance
                balance = store.credit(name, coins_num)
                store.record_payment(order_id=order_id, payment_id=payment_id, player_name=name, coins=coins_num)
        logger.info(
            "Verified payment orderId=%s paymentId=%s player=%s coins=%s balance=%s",
            order_id,
            payment_id,
            name,
            coins_num,
            balance,
        )
        return balance
