import json
from typing import Any


def safe_json(value: Any) -> str:
    """
    Serializa para JSON compacto; nunca levanta exceção.
    Valores não serializáveis viram str(); se ainda assim falhar, cai no repr().
    """
    try:
        return json.dumps(value, default=str, ensure_ascii=False, separators=(",", ":"))
    except Exception:
        try:
            return repr(value)
        except Exception:
            return "<unserializable>"


def compact(details: dict | None) -> dict:
    """Remove entradas vazias (None) de um dict de detalhes."""
    if not details:
        return {}
    return {k: v for k, v in details.items() if v is not None}
