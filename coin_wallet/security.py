import hmac
import hashlib

from fastapi import Header

from coin_wallet.config import settings
from coin_wallet.errors import SignatureMismatch, Unauthorized
from coin_wallet.logging_config import get_logger


logger = get_logger(__name__)


def compute_payment_signature(order_id: str, payment_id: str, secret: str | None = None) -> str:
    message = f"{order_id}|{payment_id}".encode()
    key = (secret if secret is not None else settings.razorpay_key_secret).encode()
    return hmac.new(key, message, hashlib.sha256).hexdigest()


def validate_payment_signature(order_id: str, payment_id: str, signature: str, secret: str | None = None):
    expected = compute_payment_signature(order_id, payment_id, secret)
    if not hmac.compare_digest(expected.encode(), str(signature).encode()):
        raise SignatureMismatch()


class AdminAuthorizer:
    """
    Decides whether an opaque admin token is allowed through. Subclass to
    swap in per-admin credentials or signed tokens.
    """

    def authorize(self, token: str | None) -> bool:
        raise NotImplementedError


class SharedSecretAuthorizer(AdminAuthorizer):
    def __init__(self, secret: str | None) -> None:
        self.secret = secret

    def authorize(self, token: str | None) -> bool:
        # With no secret configured the admin surface stays closed.
        if not self.secret or not token:
            return False
        return hmac.compare_digest(token.encode(), self.secret.encode())


admin_authorizer: AdminAuthorizer = SharedSecretAuthorizer(settings.admin_token)


def require_admin_token(x_admin_token: str | None = Header(None, alias="X-Admin-Token")):
    """
    FastAPI dependency guarding the admin routes.
    """
    if not admin_authorizer.authorize(x_admin_token):
        logger.warning("Rejected admin request: token_present=%s", bool(x_admin_token))
        raise Unauthorized()
