import threading
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from sqlalchemy.orm import Session

from coin_wallet import models
from coin_wallet.config import settings
from coin_wallet.errors import InsufficientBalance, InvalidInput
from coin_wallet.helpers import coins_in_range


class PlayerLocks:
    """
    Hands out one lock per player identifier so balance read-modify-write
    sequences for the same player never interleave.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[tuple, threading.Lock] = {}

    def lock_for(self, *key: str) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def hold(self, *key: str) -> Iterator[None]:
        with self.lock_for(*key):
            yield


player_locks = PlayerLocks()


class PlayerStore(ABC):
    """Storage port used by the wallet, payment, withdrawal and manual payment services."""

    def __init__(self, locks: PlayerLocks | None = None) -> None:
        self.locks = locks or player_locks

    @contextmanager
    def transaction(self, player: str) -> Iterator["PlayerStore"]:
        """
        Hold the player's lock for the duration of a unit of work, committing
        on success and rolling back when the block raises.
        """
        with self.locks.hold("player", player):
            try:
                yield self
            except Exception:
                self.rollback()
                raise
            self.commit()

    @abstractmethod
    def resolve(self, player: str) -> models.Player:
        """Return the player record, creating it with the starting balance if absent."""

    @abstractmethod
    def credit(self, player: str, coins: int) -> int:
        pass

    @abstractmethod
    def debit(self, player: str, coins: int) -> int:
        pass

    @abstractmethod
    def set_balance(self, player: str, balance: int) -> int:
        pass

    @abstractmethod
    def append_withdrawal(self, player: str, **fields) -> models.Withdrawal:
        pass

    @abstractmethod
    def list_withdrawals(self, player: str) -> List[models.Withdrawal]:
        pass

    @abstractmethod
    def get_withdrawal(self, player: str, index: int) -> Optional[models.Withdrawal]:
        pass

    @abstractmethod
    def all_withdrawals(self) -> List[models.Withdrawal]:
        """Every withdrawal of every player, in insertion order."""

    @abstractmethod
    def append_claim(self, **fields) -> models.ManualPayment:
        pass

    @abstractmethod
    def list_claims(self) -> List[models.ManualPayment]:
        pass

    @abstractmethod
    def get_claim(self, index: int) -> Optional[models.ManualPayment]:
        pass

    @abstractmethod
    def get_processed_payment(self, order_id: str) -> Optional[models.ProcessedPayment]:
        pass

    @abstractmethod
    def record_payment(self, **fields) -> models.ProcessedPayment:
        pass

    @abstractmethod
    def commit(self) -> None:
        pass

    @abstractmethod
    def rollback(self) -> None:
        pass


class SqlAlchemyPlayerStore(PlayerStore):
    def __init__(self, db: Session, locks: PlayerLocks | None = None) -> None:
        super().__init__(locks)
        self.db = db

    def resolve(self, player: str) -> models.Player:
        record = self.db.query(models.Player).filter_by(name=player).first()
        if record is None:
            record = models.Player(name=player, balance=settings.starting_balance)
            self.db.add(record)
            self.db.flush()
        return record

    def credit(self, player: str, coins: int) -> int:
        if coins < 0:
            raise InvalidInput("Credit amount must not be negative")
        record = self.resolve(player)
        if not coins_in_range(record.balance + coins):
            raise InvalidInput("Balance limit exceeded")
        record.balance += coins
        self.db.flush()
        return record.balance

    def debit(self, player: str, coins: int) -> int:
        record = self.resolve(player)
        if coins < 0:
            raise InvalidInput("Debit amount must not be negative")
        if coins > record.balance:
            raise InsufficientBalance()
        record.balance -= coins
        self.db.flush()
        return record.balance

    def set_balance(self, player: str, balance: int) -> int:
        record = self.resolve(player)
        record.balance = balance
        self.db.flush()
        return record.balance

    def append_withdrawal(self, player: str, **fields) -> models.Withdrawal:
        record = models.Withdrawal(player=self.resolve(player), **fields)
        self.db.add(record)
        self.db.flush()
        return record

    def list_withdrawals(self, player: str) -> List[models.Withdrawal]:
        owner = self.resolve(player)
        return (
            self.db.query(models.Withdrawal)
            .filter(models.Withdrawal.player_id == owner.id)
            .order_by(models.Withdrawal.id)
            .all()
        )

    def get_withdrawal(self, player: str, index: int) -> Optional[models.Withdrawal]:
        if index < 0:
            return None
        owner = self.db.query(models.Player).filter_by(name=player).first()
        if owner is None:
            return None
        return (
            self.db.query(models.Withdrawal)
            .filter(models.Withdrawal.player_id == owner.id)
            .order_by(models.Withdrawal.id)
            .offset(index)
            .first()
        )

    def all_withdrawals(self) -> List[models.Withdrawal]:
        return self.db.query(models.Withdrawal).order_by(models.Withdrawal.id).all()

    def append_claim(self, **fields) -> models.ManualPayment:
        record = models.ManualPayment(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def list_claims(self) -> List[models.ManualPayment]:
        return self.db.query(models.ManualPayment).order_by(models.ManualPayment.id).all()

    def get_claim(self, index: int) -> Optional[models.ManualPayment]:
        if index < 0:
            return None
        return (
            self.db.query(models.ManualPayment)
            .order_by(models.ManualPayment.id)
            .offset(index)
            .first()
        )

    def get_processed_payment(self, order_id: str) -> Optional[models.ProcessedPayment]:
        return self.db.query(models.ProcessedPayment).filter_by(order_id=order_id).first()

    def record_payment(self, **fields) -> models.ProcessedPayment:
        record = models.ProcessedPayment(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def commit(self) -> None:
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
