from typing import Any

from coin_wallet.errors import InvalidInput
from coin_wallet.helpers import coins_in_range, normalize_player, parse_number, round_half_up
from coin_wallet.logging_config import get_logger
from coin_wallet.store import PlayerStore


logger = get_logger(__name__)


class WalletService:
    def __init__(self, store: PlayerStore) -> None:
        self.store = store

    def get_balance(self, player: Any) -> int:
        name = normalize_player(player)
        with self.store.transaction(name) as store:
            return store.resolve(name).balance

    def set_balance(self, player: Any, amount: Any) -> int:
        """
        Overwrite a balance. Only real JSON numbers are accepted.
        """
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            raise InvalidInput("Invalid balance")
        value = parse_number(amount)
        if value is None or value < 0 or not coins_in_range(value):
            raise InvalidInput("Invalid balance")
        rounded = round_half_up(value)
        if not coins_in_range(rounded):
            raise InvalidInput("Invalid balance")
        name = normalize_player(player)
        with self.store.transaction(name) as store:
            balance = store.set_balance(name, rounded)
        logger.info("Set balance player=%s balance=%s", name, balance)
        return balance

    def credit(self, player: Any, coins: int) -> int:
        name = normalize_player(player)
        with self.store.transaction(name) as store:
            balance = store.credit(name, coins)
        logger.info("Credited player=%s coins=%s balance=%s", name, coins, balance)
        return balance

    def debit(self, player: Any, coins: int) -> int:
        name = normalize_player(player)
        with self.store.transaction(name) as store:
            balance = store.debit(name, coins)
        logger.info("Debited player=%s coins=%s balance=%s", name, coins, balance)
        return balance
