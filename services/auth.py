"""
Caller identity.

The account id comes from the ``X-Account-Id`` header. When ``AUTH_SECRET`` is
configured the header must be accompanied by ``X-Account-Signature``, the hex
HMAC-SHA256 of the account id keyed with that secret.
"""
import hashlib
import hmac

from config import get_config
from errors import UnauthorizedCaller

ACCOUNT_HEADER = "X-Account-Id"
SIGNATURE_HEADER = "X-Account-Signature"


def sign_account(account_id: str, secret: str) -> str:
    return hmac.new(secret.encode(), account_id.encode(), hashlib.sha256).hexdigest()


def resolve_caller(headers) -> str:
    account_id = (headers.get(ACCOUNT_HEADER) or "").strip()
    if not account_id:
        raise UnauthorizedCaller(f"Missing {ACCOUNT_HEADER} header.")

    secret = get_config().auth_secret
    if secret:
        signature = headers.get(SIGNATURE_HEADER) or ""
        if not hmac.compare_digest(sign_account(account_id, secret), signature):
            raise UnauthorizedCaller("Invalid account signature.")
    return account_id
