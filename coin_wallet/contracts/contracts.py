import time
from decimal import Decimal

from pydantic import BaseModel, StrictInt

from coin_wallet.config import settings
from coin_wallet.helpers import coins_to_subunits


class GatewayOrderNotes(BaseModel):
    player: str
    coins: str


class GatewayOrderRequest(BaseModel):
    amount: StrictInt
    currency: str
    receipt: str
    notes: GatewayOrderNotes

    @classmethod
    def from_coins(cls, player: str, coins: Decimal) -> "GatewayOrderRequest":
        if coins == coins.to_integral_value():
            coins_text = str(int(coins))
        else:
            coins_text = format(coins.normalize(), "f")
        return cls(
            amount=coins_to_subunits(coins),  # convert coins to paise
            currency=settings.currency,
            receipt=f"order_rcptid_{int(time.time() * 1000)}",
            notes=GatewayOrderNotes(player=player, coins=coins_text),
        )


class GatewayOrder(BaseModel):
    id: str
    amount: int
    currency: str
    receipt: str | None = None
    status: str | None = None
