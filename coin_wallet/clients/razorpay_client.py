import httpx

from coin_wallet.config import settings
from coin_wallet.contracts.contracts import GatewayOrder, GatewayOrderRequest
from coin_wallet.errors import GatewayError


class RazorpayClient:
    def __init__(
        self,
        key_id: str | None = None,
        key_secret: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.key_id = key_id if key_id is not None else settings.razorpay_key_id
        key_secret = key_secret if key_secret is not None else settings.razorpay_key_secret
        self.client = httpx.AsyncClient(
            base_url=base_url or str(settings.razorpay_base_url),
            auth=(self.key_id, key_secret),
            timeout=timeout if timeout is not None else settings.gateway_timeout_seconds,
            transport=transport,
        )

    async def create_order(self, order: GatewayOrderRequest) -> GatewayOrder:
        try:
            resp = await self.client.post("orders", json=order.model_dump())
        except httpx.RequestError as exc:
            raise GatewayError(f"gateway request error: {exc}") from exc
        if resp.status_code != 200:
            raise GatewayError(f"gateway refused order: {resp.text}", status_code=resp.status_code)
        return GatewayOrder.model_validate(resp.json())

    async def aclose(self) -> None:
        await self.client.aclose()


razorpay_client = RazorpayClient()
