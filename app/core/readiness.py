"""애플리케이션 준비성(readiness) 체크 유틸."""

from __future__ import annotations

import asyncio
import os
import socket
from pathlib import Path

import redis

from app.core.config import Settings, get_settings
from app.core.timeout_policy import TimeoutPolicy, get_timeout_policy
from app.services.dining_cache import get_dining_cache

ReadinessCheck = dict[str, str | bool]


def _ok(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "ok", "ok": True, "required": required, "detail": detail}


def _fail(detail: str, *, required: bool = True) -> ReadinessCheck:
    return {"status": "fail", "ok": False, "required": required, "detail": detail}


def _skip(detail: str, *, required: bool = False) -> ReadinessCheck:
    return {"status": "skip", "ok": True, "required": required, "detail": detail}


async def _check_tcp_connectivity(host: str, port: int, timeout_seconds: int, label: str) -> ReadinessCheck:
    def _connect() -> None:
        with socket.create_connection((host, port), timeout=timeout_seconds):
            return None

    try:
        await asyncio.to_thread(_connect)
        return _ok(f"{label} 연결 가능 ({host}:{port})", required=False)
    except OSError as exc:
        return _fail(f"{label} 연결 실패 ({host}:{port}): {exc}", required=False)


async def _check_trips_dir_readiness(settings: Settings) -> ReadinessCheck:
    trips_dir = Path(settings.TRIPS_DIR)

    def _check() -> None:
        trips_dir.mkdir(parents=True, exist_ok=True)
        if not os.access(trips_dir, os.W_OK):
            raise PermissionError(f"쓰기 권한이 없습니다: {trips_dir}")

    try:
        await asyncio.to_thread(_check)
        return _ok(f"여행 저장 디렉터리 사용 가능 ({trips_dir})")
    except OSError as exc:
        return _fail(f"여행 저장 디렉터리 사용 불가 ({trips_dir}): {exc}")


async def _check_redis_readiness() -> ReadinessCheck:
    cache = get_dining_cache()
    if not cache.enabled:
        return _skip("REDIS_URL 미설정으로 식당 추천 캐시를 사용하지 않습니다.")

    try:
        reachable = await asyncio.to_thread(cache.ping)
    except redis.RedisError as exc:
        return _fail(f"Redis 연결 실패: {exc}", required=False)
    if not reachable:
        return _fail("Redis ping 응답 없음", required=False)
    return _ok("Redis 연결 확인 완료", required=False)


async def _check_google_places_readiness(settings: Settings, timeout_policy: TimeoutPolicy) -> ReadinessCheck:
    if not settings.GOOGLE_MAPS_API_KEY:
        return _skip("GOOGLE_MAPS_API_KEY 미설정으로 Google Places 체크를 건너뜁니다.")

    return await _check_tcp_connectivity(
        host="places.googleapis.com",
        port=443,
        timeout_seconds=timeout_policy.external_api_timeout_seconds,
        label="Google Places API",
    )


async def collect_readiness_status() -> dict[str, object]:
    """저장 디렉터리/캐시/외부 API 의존성 준비 상태를 점검합니다.

    여행 저장 디렉터리만 필수이며, Redis와 Google Places는 실패해도 조회 결과가 비는 것으로 끝난다.
    """
    settings = get_settings()
    timeout_policy = get_timeout_policy(settings)

    trips_check, redis_check, google_places_check = await asyncio.gather(
        _check_trips_dir_readiness(settings),
        _check_redis_readiness(),
        _check_google_places_readiness(settings, timeout_policy),
    )

    checks: dict[str, ReadinessCheck] = {
        "trips_dir": trips_check,
        "redis": redis_check,
        "google_places": google_places_check,
    }
    required_checks_ok = all(bool(check["ok"]) for check in checks.values() if bool(check.get("required", True)))

    return {
        "status": "ready" if required_checks_ok else "not_ready",
        "checks": checks,
    }
