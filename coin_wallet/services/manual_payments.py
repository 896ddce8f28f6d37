from typing import Any, List

from coin_wallet.config import ClaimStatus
from coin_wallet.errors import InvalidInput
from coin_wallet.helpers import MAX_COINS, coins_in_range, currency_to_coins, parse_index, parse_number, serialize_claim
from coin_wallet.logging_config import get_logger
from coin_wallet.store import PlayerStore


logger = get_logger(__name__)

CLAIMS_LOCK = "manual-payments"


class ManualPaymentService:
    """
    Claims of money sent outside the gateway. Coins are only granted once an
    admin approves the claim; there is no reject path.
    """

    def __init__(self, store: PlayerStore) -> None:
        self.store = store

    def submit_claim(self, player: Any, amount: Any, txn_id: Any) -> None:
        if not player or not amount or not txn_id:
            raise InvalidInput("player, amount and txnId are required")
        value = parse_number(amount)
        if value is None or value <= 0 or value > MAX_COINS or not coins_in_range(currency_to_coins(value)):
            raise InvalidInput("Invalid amount")
        record = self.store.append_claim(
            player_name=str(player),
            amount=float(value),
            txn_id=str(txn_id),
            status=ClaimStatus.PENDING.value,
        )
        self.store.commit()
        logger.info("Manual payment claim submitted player=%s amount=%s txnId=%s id=%s", player, value, txn_id, record.id)

    def admin_list_claims(self) -> List[dict]:
        return [serialize_claim(record, index) for index, record in enumerate(self.store.list_claims())]

    def admin_approve(self, index: Any) -> int:
        position = parse_index(index)
        if position is None:
            raise InvalidInput("Invalid or already processed claim")
        # Claims are read under their own lock so two approvals cannot both see Pending.
        with self.store.locks.hold(CLAIMS_LOCK):
            claim = self.store.get_claim(position)
            if claim is None or claim.status != ClaimStatus.PENDING.value:
                raise InvalidInput("Invalid or already processed claim")
            name = claim.player_name
            with self.store.transaction(name) as store:
                coins = currency_to_coins(claim.amount)
                balance = store.credit(name, coins)
                claim.status = ClaimStatus.APPROVED.value
        logger.info("Manual payment approved index=%s player=%s coins=%s balance=%s", position, name, coins, balance)
        return balance
