"""FastAPI 애플리케이션 진입점."""

from __future__ import annotations

import asyncio

from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, Response
from starlette.middleware.cors import CORSMiddleware

from app.api import suggestions, trips
from app.client.renderer import render_shell
from app.core.config import get_settings
from app.core.logger import get_logger
from app.core.logging_config import configure_logging
from app.core.readiness import collect_readiness_status
from app.core.timeout_policy import get_timeout_policy
from app.services.trip_repository import get_trip_repository

configure_logging()
logger = get_logger(__name__)
settings = get_settings()
timeout_policy = get_timeout_policy(settings)


def _split_csv(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _configure_cors(app_: FastAPI) -> None:
    origins = _split_csv(settings.CORS_ALLOW_ORIGINS)
    if not origins:
        return

    app_.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=False,
        allow_methods=_split_csv(settings.CORS_ALLOW_METHODS) or ["GET"],
        allow_headers=_split_csv(settings.CORS_ALLOW_HEADERS) or ["Content-Type"],
    )


app = FastAPI(title="Itinerary Planner")

_configure_cors(app)

app.include_router(trips.router)
app.include_router(suggestions.router)


@app.middleware("http")
async def enforce_request_timeout(request: Request, call_next) -> Response:
    """요청 처리 시간이 REQUEST_TIMEOUT_SECONDS를 넘으면 504를 반환합니다."""
    try:
        return await asyncio.wait_for(call_next(request), timeout=timeout_policy.request_timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning("Request timed out: %s %s", request.method, request.url.path)
        return JSONResponse(status_code=504, content={"detail": "요청 처리 시간이 초과되었습니다."})


@app.middleware("http")
async def add_security_headers(request: Request, call_next) -> Response:
    """기본 보안 헤더를 응답에 추가합니다."""
    response = await call_next(request)
    if not settings.SECURITY_HEADERS_ENABLED:
        return response

    response.headers.setdefault("X-Content-Type-Options", "nosniff")
    response.headers.setdefault("Referrer-Policy", "no-referrer")
    response.headers.setdefault("Permissions-Policy", "geolocation=(), microphone=(), camera=()")
    response.headers.setdefault("Cache-Control", "no-store")
    return response


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """예상하지 못한 예외를 표준 형식으로 처리합니다."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path, exc_info=exc)
    message = str(exc) if settings.EXPOSE_INTERNAL_ERRORS else "내부 서버 오류가 발생했습니다."
    return JSONResponse(status_code=500, content={"detail": message})


@app.get("/", response_class=HTMLResponse)
def editor_shell() -> HTMLResponse:
    """여행 편집기 페이지 골격을 반환합니다."""
    trip_ids = get_trip_repository().list_trip_ids()
    return HTMLResponse(render_shell(trip_ids, settings.GOOGLE_MAPS_API_KEY, add_day_enabled=False))


@app.get("/health")
def health_check() -> dict:
    """헬스 체크 엔드포인트."""
    return {"status": "ok", "message": "Itinerary Planner Server is running"}


@app.get("/health/ready")
async def readiness_check() -> JSONResponse:
    """저장 디렉터리와 외부 의존성 준비 상태를 반환합니다."""
    result = await collect_readiness_status()
    status_code = 200 if result["status"] == "ready" else 503
    return JSONResponse(status_code=status_code, content=result)
