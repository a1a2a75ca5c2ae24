from typing import Any, Mapping, MutableMapping

REDACTED = "***REDACTED***"

SENSITIVE_KEYS = (
    "password",
    "token",
    "authorization",
    "secret",
    "api_key",
    "creditCard",
    "cpf",
    "phone",
)

_FRAGMENTS = tuple(k.lower() for k in SENSITIVE_KEYS)


def is_sensitive(key: Any) -> bool:
    lower_key = str(key).lower()
    return any(fragment in lower_key for fragment in _FRAGMENTS)


def sanitize(data: Any) -> Any:
    """
    Copia rasa do contexto com valores sensíveis trocados por REDACTED.
    Só olha as chaves do primeiro nível; dicts aninhados passam intactos.
    Qualquer coisa que não seja Mapping volta sem alteração.
    """
    if not isinstance(data, Mapping):
        return data
    return {
        key: (REDACTED if is_sensitive(key) else value)
        for key, value in data.items()
    }


def redact_event(logger: Any, method_name: str, event_dict: MutableMapping[str, Any]) -> MutableMapping[str, Any]:
    """Processor do structlog: mesma regra de sanitize() aplicada ao event_dict."""
    for key in list(event_dict.keys()):
        if key != "event" and is_sensitive(key):
            event_dict[key] = REDACTED
    return event_dict
