from enum import Enum
from pydantic import AnyHttpUrl
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Optional


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env")

    razorpay_key_id: str = "rzp_test_key"
    razorpay_key_secret: str = "change_secret"
    razorpay_base_url: AnyHttpUrl = "https://api.razorpay.com/v1/"
    gateway_timeout_seconds: float = 10.0
    currency: str = "INR"
    admin_token: Optional[str] = None
    db_url: str = "sqlite:///./coin_wallet.db"
    port: int = 5000
    cors_origins: list[str] = ["*"]
    starting_balance: int = 1000
    min_withdrawal_coins: int = 1000
    coins_per_unit: int = 100
    default_player: str = "Guest"
    log_level: str = "INFO"

settings = Settings()

class WithdrawalStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

class ClaimStatus(str, Enum):
    PENDING = "Pending"
    APPROVED = "Approved"

# Statuses a withdrawal can no longer leave once set.
final_withdrawal_statuses = {
    WithdrawalStatus.APPROVED.value,
    WithdrawalStatus.REJECTED.value,
}
