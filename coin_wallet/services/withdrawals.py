from typing import Any, List

from coin_wallet.config import WithdrawalStatus, final_withdrawal_statuses, settings
from coin_wallet.errors import BelowMinimum, InvalidInput, NotFound
from coin_wallet.helpers import coins_to_currency, normalize_player, parse_index, parse_int, serialize_withdrawal
from coin_wallet.logging_config import get_logger
from coin_wallet.store import PlayerStore


logger = get_logger(__name__)


class WithdrawalService:
    """
    Player withdrawal requests and their administrative review.

    Coins are debited when the request is made. A request moves from
    Pending to Approved or Rejected exactly once; rejecting refunds the coins.
    """

    def __init__(self, store: PlayerStore) -> None:
        self.store = store

    def request_withdrawal(self, player: Any, upi_id: Any, coins: Any) -> dict:
        name = normalize_player(player)
        if not upi_id or "@" not in str(upi_id):
            raise InvalidInput("Invalid UPI ID")
        coins_num = parse_int(coins)
        if not coins_num or coins_num < settings.min_withdrawal_coins:
            raise BelowMinimum(f"Minimum withdrawal {settings.min_withdrawal_coins} coins")

        with self.store.transaction(name) as store:
            balance = store.debit(name, coins_num)
            store.append_withdrawal(
                name,
                coins=coins_num,
                amount=coins_to_currency(coins_num),
                upi_id=str(upi_id),
                status=WithdrawalStatus.PENDING.value,
            )
            history = [serialize_withdrawal(r) for r in store.list_withdrawals(name)]
        logger.info("Withdrawal requested player=%s coins=%s balance=%s", name, coins_num, balance)
        return {"newBalance": balance, "history": history}

    def list_history(self, player: Any) -> List[dict]:
        name = normalize_player(player)
        with self.store.transaction(name) as store:
            return [serialize_withdrawal(r) for r in store.list_withdrawals(name)]

    def admin_update(self, player: Any, index: Any, status: Any, txn_id: Any = None, note: Any = None) -> List[dict]:
        position = parse_index(index)
        if not player or position is None:
            raise InvalidInput("Player and integer index are required")
        allowed = [s.value for s in WithdrawalStatus]
        if status not in allowed:
            raise InvalidInput(f"Status must be one of {', '.join(allowed)}")
        name = str(player)

        with self.store.transaction(name) as store:
            record = store.get_withdrawal(name, position)
            if record is None:
                raise NotFound("Withdrawal not found")
            previous = record.status
            if previous in final_withdrawal_statuses and status != previous:
                raise InvalidInput(f"Withdrawal already {previous}")
            if previous == WithdrawalStatus.PENDING.value and status == WithdrawalStatus.REJECTED.value:
                store.credit(name, record.coins)
            record.status = status
            if txn_id:
                record.txn_id = str(txn_id)
            if note:
                record.note = str(note)
            history = [serialize_withdrawal(r) for r in store.list_withdrawals(name)]
        logger.info(
            "Withdrawal updated player=%s index=%s status=%s->%s txnId=%s",
            name,
            position,
            previous,
            status,
            txn_id,
        )
        return history

    def admin_list_all(self) -> List[dict]:
        positions: dict[int, int] = {}
        tagged = []
        for record in self.store.all_withdrawals():
            index = positions.get(record.player_id, 0)
            positions[record.player_id] = index + 1
            tagged.append((record, index))
        tagged.sort(key=lambda item: (item[0].created_at, item[0].id), reverse=True)
        return [
            {**serialize_withdrawal(record), "player": record.player.name, "index": index}
            for record, index in tagged
        ]
