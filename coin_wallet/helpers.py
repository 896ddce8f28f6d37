import math
import re
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation, localcontext
from typing import Any

from coin_wallet.config import settings
from coin_wallet.models import ManualPayment, Withdrawal

_LEADING_INT = re.compile(r"^\s*([+-]?\d{1,4000})")
_INDEX = re.compile(r"-?\d{1,18}", re.ASCII)

# Balances and coin counts live in signed 64-bit integer columns.
MAX_COINS = 2 ** 63 - 1


def normalize_player(player: Any) -> str:
    if player is None or player == "":
        return settings.default_player
    return str(player)


def parse_int(value: Any) -> int | None:
    """
    Read the leading integer of ``value`` the way a lenient form parser does:
    ``"1500coins"`` -> 1500, ``1500.9`` -> 1500, ``"abc"`` -> None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            return None
        return int(value)
    match = _LEADING_INT.match(str(value))
    if not match:
        return None
    return int(match.group(1))


def parse_number(value: Any) -> Decimal | None:
    """
    Return ``value`` as a finite Decimal, or None when it is not a number.
    Numeric strings are accepted, booleans are not.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    try:
        number = Decimal(str(value).strip())
    except InvalidOperation:
        return None
    if not number.is_finite():
        return None
    return number


def parse_index(index: Any) -> int | None:
    """
    Return a list position, or None for anything that is not a whole number
    (booleans, ``1.5``, ``"first"``).
    """
    if isinstance(index, bool):
        return None
    if isinstance(index, int):
        return index if coins_in_range(index) else None
    if isinstance(index, float):
        return int(index) if index.is_integer() and coins_in_range(index) else None
    if isinstance(index, str) and _INDEX.fullmatch(index.strip()):
        return int(index.strip())
    return None


def coins_in_range(coins: Decimal | int) -> bool:
    return abs(coins) <= MAX_COINS


def round_half_up(value: Decimal | int | float) -> int:
    # to_integral_value is not limited by the context precision, quantize is.
    return int(Decimal(str(value)).to_integral_value(rounding=ROUND_HALF_UP))


def coins_to_subunits(coins: Decimal | int) -> int:
    # 100 coins = 1 currency unit = 100 subunits (paise)
    with localcontext() as ctx:
        ctx.prec = 60
        units = Decimal(str(coins)) / settings.coins_per_unit
        return round_half_up(units * 100)


def coins_to_currency(coins: int) -> str:
    units = Decimal(coins) / settings.coins_per_unit
    return str(units.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def currency_to_coins(amount: Decimal | float) -> int:
    with localcontext() as ctx:
        ctx.prec = 60
        return round_half_up(Decimal(str(amount)) * settings.coins_per_unit)


def isoformat_utc(value: datetime | None) -> str | None:
    if value is None:
        return None
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def serialize_withdrawal(record: Withdrawal) -> dict:
    return {
        "coins": record.coins,
        "amountInRupees": record.amount,
        "upiId": record.upi_id,
        "status": record.status,
        "txnId": record.txn_id,
        "note": record.note,
        "time": isoformat_utc(record.created_at),
    }


def serialize_claim(record: ManualPayment, index: int) -> dict:
    return {
        "index": index,
        "player": record.player_name,
        "amount": record.amount,
        "txnId": record.txn_id,
        "status": record.status,
        "time": isoformat_utc(record.created_at),
    }
