from coin_wallet.services.manual_payments import ManualPaymentService
from coin_wallet.services.payments import PaymentService
from coin_wallet.services.wallet import WalletService
from coin_wallet.services.withdrawals import WithdrawalService

__all__ = ["ManualPaymentService", "PaymentService", "WalletService", "WithdrawalService"]
