import math
from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def iso_timestamp(moment: datetime | None = None) -> str:
    """ISO-8601 em UTC com milissegundos, ex: 2025-03-01T12:00:00.123Z"""
    moment = (moment or utc_now()).astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def local_date_str(moment: datetime | None = None) -> str:
    """Data local no formato YYYY-MM-DD (usada no nome dos arquivos de log)."""
    moment = moment or datetime.now().astimezone()
    return moment.astimezone().date().isoformat()


def minutes_ceil(seconds: float) -> int:
    return int(math.ceil(seconds / 60))
