import hashlib
import hmac
import os
import threading
import uuid
from typing import Any, Dict, Optional

from core.logger import get_category_logger

ITERATIONS = 120_000


def hash_password(password: str, salt: Optional[bytes] = None) -> str:
    salt = salt or os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", password.encode(), salt, ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def check_password(password: str, stored: str) -> bool:
    salt_hex, _, digest_hex = stored.partition("$")
    candidate = hash_password(password, bytes.fromhex(salt_hex))
    return hmac.compare_digest(candidate.partition("$")[2], digest_hex)


class AccountService:
    """
    Cadastro de contas em memória (o banco real fica fora deste serviço).
    Cada leitura/escrita gera um evento DATABASE.
    """
    def __init__(self):
        self._accounts: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def register(self, *, name: str, email: str, password: str) -> Dict[str, Any]:
        email = email.lower()
        with self._lock:
            if email in self._accounts:
                get_category_logger().database("create", "Account", "failure", {"email": email, "reason": "duplicate"})
                raise ValueError("E-mail already registered")
            account = {
                "id": str(uuid.uuid4()),
                "name": name,
                "email": email,
                "password": hash_password(password),
            }
            self._accounts[email] = account
        get_category_logger().database("create", "Account", "success", {"id": account["id"], "email": email})
        return public_view(account)

    def find_by_email(self, email: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            account = self._accounts.get(email.lower())
        get_category_logger().database(
            "findUnique", "Account", "success", {"email": email, "found": account is not None}
        )
        return account

    def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        account = self.find_by_email(email)
        if account is None or not check_password(password, account["password"]):
            return None
        return public_view(account)


def public_view(account: Dict[str, Any]) -> Dict[str, Any]:
    return {"id": account["id"], "name": account["name"], "email": account["email"]}


_service: Optional[AccountService] = None


def get_account_service() -> AccountService:
    global _service
    if _service is None:
        _service = AccountService()
    return _service
