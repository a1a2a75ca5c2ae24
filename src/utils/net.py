from starlette.requests import Request

from core.config import settings


def client_ip(request: Request) -> str:
    # headers de proxy só valem se a app estiver atrás de um proxy confiável
    if settings.TRUST_PROXY_HEADERS:
        forwarded = (
            request.headers.get("x-forwarded-for", "").split(",")[0].strip()
            or request.headers.get("x-real-ip", "")
        )
        if forwarded:
            return forwarded
    return request.client.host if request.client else "unknown"
