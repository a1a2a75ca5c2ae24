# src/middlewares/login_guard.py
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

import structlog
from fastapi import HTTPException, Request, status

from core.config import settings
from core.logger import get_category_logger
from utils.dates import minutes_ceil
from utils.net import client_ip

log = structlog.get_logger()


@dataclass
class LoginAttemptRecord:
    failure_count: int = 0
    last_failure_at: float = 0.0


@dataclass(frozen=True)
class GuardDecision:
    allowed: bool
    retry_after_minutes: int = 0

    @property
    def message(self) -> str:
        if self.allowed:
            return ""
        return f"Too many failed attempts. Try again in {self.retry_after_minutes} minutes."


class LoginAttemptGuard:
    """
    Conta falhas de login por IP e bloqueia depois de max_attempts
    até passar block_seconds desde a última falha.
    Escopo: instância do processo (memória local), nada é compartilhado entre réplicas.
    """
    def __init__(
        self,
        max_attempts: Optional[int] = None,
        block_seconds: Optional[float] = None,
        time_func: Optional[Callable[[], float]] = None,
    ):
        self.max_attempts = settings.MAX_LOGIN_ATTEMPTS if max_attempts is None else max_attempts
        self.block_seconds = settings.LOGIN_BLOCK_SECONDS if block_seconds is None else block_seconds
        self._time_func = time_func or time.time
        self._records: Dict[str, LoginAttemptRecord] = {}
        self._lock = threading.Lock()

    def check(self, ip: str) -> GuardDecision:
        now = self._time_func()
        with self._lock:
            record = self._records.get(ip)
            if record is None or record.failure_count < self.max_attempts:
                return GuardDecision(allowed=True)

            remaining = record.last_failure_at + self.block_seconds - now
            if remaining > 0:
                decision = GuardDecision(allowed=False, retry_after_minutes=minutes_ceil(remaining))
            else:
                # janela expirou: volta para CLEAR
                del self._records[ip]
                decision = GuardDecision(allowed=True)

        if not decision.allowed:
            log.warning("login-guard-blocked", ip=ip, retry_after_minutes=decision.retry_after_minutes)
        return decision

    def register_failure(self, ip: str) -> int:
        """Retorna attemptsRemaining (pode ficar negativo)."""
        with self._lock:
            record = self._records.get(ip)
            if record is None:
                record = self._records[ip] = LoginAttemptRecord()
            record.failure_count += 1
            record.last_failure_at = self._time_func()
            remaining = self.max_attempts - record.failure_count

        get_category_logger().warn(
            "Failed login attempt",
            {"ip": ip, "attemptsRemaining": remaining},
        )
        return remaining

    def register_success(self, ip: str) -> None:
        with self._lock:
            self._records.pop(ip, None)

    def failures(self, ip: str) -> int:
        with self._lock:
            record = self._records.get(ip)
            return record.failure_count if record else 0


_guard: Optional[LoginAttemptGuard] = None


def get_login_guard() -> LoginAttemptGuard:
    global _guard
    if _guard is None:
        _guard = LoginAttemptGuard()
    return _guard


def reset_login_guard(guard: Optional[LoginAttemptGuard] = None) -> LoginAttemptGuard:
    global _guard
    _guard = guard or LoginAttemptGuard()
    return _guard


async def enforce_login_attempts(request: Request) -> str:
    """Dependência do /login: barra o IP bloqueado antes de olhar credenciais."""
    ip = client_ip(request)
    decision = get_login_guard().check(ip)
    if not decision.allowed:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail=decision.message,
        )
    return ip
