from __future__ import annotations

import sys
import threading
import traceback
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Dict, Mapping, Optional

import structlog

from core.config import settings
from core.redaction import sanitize
from utils.dates import iso_timestamp, local_date_str
from utils.formatting import compact, safe_json

log = structlog.get_logger()

# Cores ANSI para o console
RESET = "\x1b[0m"
RED = "\x1b[31m"
YELLOW = "\x1b[33m"
GREEN = "\x1b[32m"
BLUE = "\x1b[34m"
GRAY = "\x1b[90m"


class Category(str, Enum):
    ERROR = "ERROR"
    WARN = "WARN"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    DEBUG = "DEBUG"
    USER_ACTION = "USER_ACTION"
    HTTP = "HTTP"
    AUTH = "AUTH"
    DATABASE = "DATABASE"

    @property
    def sink(self) -> str:
        return SINK_NAMES[self]


SINK_NAMES: Dict[Category, str] = {
    Category.ERROR: "errors",
    Category.WARN: "warnings",
    Category.INFO: "general",
    Category.SUCCESS: "general",
    Category.DEBUG: "debug",
    Category.USER_ACTION: "user-actions",
    Category.HTTP: "http",
    Category.AUTH: "auth",
    Category.DATABASE: "database",
}

BASE_COLORS: Dict[Category, str] = {
    Category.ERROR: RED,
    Category.WARN: YELLOW,
    Category.INFO: BLUE,
    Category.SUCCESS: GREEN,
    Category.DEBUG: GRAY,
    Category.USER_ACTION: GREEN,
}


def color_for(category: Category, outcome: Any = None) -> str:
    """HTTP pinta pelo status code; AUTH/DATABASE pelo resultado."""
    if category is Category.HTTP:
        status = int(outcome or 0)
        if status >= 400:
            return RED
        if status >= 300:
            return YELLOW
        return GREEN
    if category in (Category.AUTH, Category.DATABASE):
        return GREEN if outcome == "success" else RED
    return BASE_COLORS[category]


def describe_error(error: BaseException) -> str:
    stack = "".join(traceback.format_exception(type(error), error, error.__traceback__))
    return stack.rstrip()


def _frozen(value: Any) -> Any:
    # só o primeiro nível fica somente-leitura
    return MappingProxyType(dict(value)) if isinstance(value, Mapping) else value


def _plain(value: Any) -> Any:
    return dict(value) if isinstance(value, Mapping) else value


@dataclass(frozen=True)
class LogEvent:
    category: Category
    timestamp: str
    message: str
    context: Any = field(default_factory=dict)
    data: Any = None
    error_detail: Optional[str] = None
    color: str = ""

    def render(self) -> str:
        line = f"[{self.timestamp}] [{self.category.value}] {self.message}"
        if self.data:
            line += f"\n  Data: {safe_json(_plain(self.data))}"
        if self.context:
            line += f"\n  Context: {safe_json(_plain(self.context))}"
        if self.error_detail:
            line += f"\n  Stack: {self.error_detail}"
        return line


class CategoryLogger:
    """
    Logger por categoria: cada evento vai para o console (colorido, best-effort)
    e para o arquivo da categoria do dia, ex: logs/auth-2025-03-01.log.
    Erro de escrita em arquivo NÃO é tratado aqui; sobe para quem chamou.
    """

    def __init__(
        self,
        log_dir: Optional[Path | str] = None,
        debug_enabled: Optional[bool] = None,
        console: Any = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.log_dir = Path(log_dir or settings.LOG_DIR)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self._debug_enabled = debug_enabled
        self._console = console
        self._stdout = structlog.PrintLogger(file=sys.stdout)
        self._stderr = structlog.PrintLogger(file=sys.stderr)
        self._clock = clock or (lambda: datetime.now().astimezone())
        self._locks: Dict[Path, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    @property
    def debug_enabled(self) -> bool:
        if self._debug_enabled is None:
            return bool(settings.DEBUG)
        return self._debug_enabled

    def sink_path(self, category: Category, moment: Optional[datetime] = None) -> Path:
        moment = moment or self._clock()
        return self.log_dir / f"{category.sink}-{local_date_str(moment)}.log"

    # ---------- pipeline único ----------
    def emit(
        self,
        category: Category,
        message: str,
        *,
        context: Any = None,
        data: Any = None,
        error: Optional[BaseException] = None,
        outcome: Any = None,
    ) -> LogEvent:
        now = self._clock()
        event = LogEvent(
            category=category,
            timestamp=iso_timestamp(now),
            message=message,
            context=_frozen(sanitize(context) or {}),
            data=_frozen(sanitize(data)),
            error_detail=describe_error(error) if error is not None else None,
            color=color_for(category, outcome),
        )
        line = event.render()
        self._write_console(event, line)
        self._append(self.sink_path(category, now), line)
        return event

    def _write_console(self, event: LogEvent, line: str) -> None:
        target = self._console
        if target is None:
            target = self._stderr if event.category in (Category.ERROR, Category.WARN) else self._stdout
        try:
            target.msg(f"{event.color}{line}{RESET}")
        except Exception:
            pass

    def _lock_for(self, path: Path) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(path)
            if lock is None:
                lock = self._locks[path] = threading.Lock()
            return lock

    def _append(self, path: Path, line: str) -> None:
        with self._lock_for(path):
            is_new = not path.exists()
            with open(path, "a", encoding="utf-8") as fh:
                fh.write(line + "\n")
        if is_new:
            log.debug("log-sink-created", path=str(path))

    # ---------- uma operação por categoria ----------
    def error(self, message: str, error: Optional[BaseException] = None, context: Any = None) -> None:
        self.emit(Category.ERROR, message, context=context, error=error)

    def warn(self, message: str, context: Any = None) -> None:
        self.emit(Category.WARN, message, context=context)

    def info(self, message: str, context: Any = None) -> None:
        self.emit(Category.INFO, message, context=context)

    def success(self, message: str, context: Any = None) -> None:
        self.emit(Category.SUCCESS, message, context=context)

    def debug(self, message: str, data: Any = None, context: Any = None) -> None:
        if not self.debug_enabled:
            return
        self.emit(Category.DEBUG, message, context=context, data=data)

    def user_action(self, action: str, user_id: Any = "anonymous", details: Any = None) -> None:
        self.emit(Category.USER_ACTION, f"User: {user_id} | Action: {action}", context=details)

    def http(
        self,
        method: str,
        path: str,
        status_code: int,
        duration_ms: float,
        user_id: Any = "anonymous",
        details: Optional[dict] = None,
    ) -> None:
        message = (
            f"{method} {path} | Status: {status_code} | "
            f"Duration: {int(duration_ms)}ms | User: {user_id}"
        )
        self.emit(Category.HTTP, message, context=compact(details), outcome=status_code)

    def auth(self, action: str, identifier: Any = "", result: str = "success", details: Any = None) -> None:
        message = f"Action: {action} | Identifier: {identifier} | Result: {result}"
        self.emit(Category.AUTH, message, context=details, outcome=result)

    def database(self, operation: str, entity: str, status: str = "success", details: Any = None) -> None:
        message = f"Operation: {operation} | Entity: {entity} | Status: {status}"
        self.emit(Category.DATABASE, message, context=details, outcome=status)


_logger: Optional[CategoryLogger] = None


def get_category_logger() -> CategoryLogger:
    global _logger
    if _logger is None:
        _logger = CategoryLogger()
    return _logger


def configure_category_logger(instance: Optional[CategoryLogger] = None, **kwargs: Any) -> CategoryLogger:
    """Troca a instância global (startup da app e testes)."""
    global _logger
    _logger = instance or CategoryLogger(**kwargs)
    return _logger
