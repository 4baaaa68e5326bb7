"""활동 시작 시각과 일자 표시 문자열 계산 모듈.

활동 시작 시각은 저장하지 않고 항상 기상 시각과 앞선 활동 길이의 누적합으로 파생한다.
"""

from __future__ import annotations

import math
from datetime import date, timedelta
from typing import Any

DEFAULT_WAKE_UP_TIME = "08:00"

_DEFAULT_WAKE_UP_MINUTES = 8 * 60
_MINUTES_PER_DAY = 24 * 60


def parse_time_to_minutes(value: str | None) -> int | None:
    """`HH:MM`(또는 `h:mm AM/PM`) 문자열을 자정 기준 분으로 파싱합니다."""
    if not value:
        return None

    text = str(value).strip().upper()
    if not text:
        return None

    is_pm = text.endswith("PM")
    is_am = text.endswith("AM")
    cleaned = text.removesuffix("AM").removesuffix("PM").strip()

    parts = cleaned.split(":")
    if len(parts) != 2:
        return None
    try:
        hour = int(parts[0])
        minute = int(parts[1])
    except ValueError:
        return None

    if is_am or is_pm:
        if not 1 <= hour <= 12:
            return None
        if is_pm and hour != 12:
            hour += 12
        elif is_am and hour == 12:
            hour = 0

    if not (0 <= hour < 24 and 0 <= minute < 60):
        return None
    return hour * 60 + minute


def format_minutes_12h(total_minutes: int) -> str:
    """분 단위 시각을 `h:mm AM/PM` 형식으로 포맷합니다. 자정을 넘기면 다음 날로 순환합니다."""
    normalized = int(total_minutes) % _MINUTES_PER_DAY
    hour, minute = divmod(normalized, 60)
    period = "PM" if hour >= 12 else "AM"
    return f"{hour % 12 or 12}:{minute:02d} {period}"


def coerce_length(value: Any) -> int:
    """활동 길이를 0 이상의 정수 분으로 강제 변환합니다. 숫자가 아니거나 음수면 0입니다."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, float):
        if math.isnan(value) or math.isinf(value):
            return 0
        return max(0, int(value))
    if isinstance(value, int):
        return max(0, value)

    text = str(value or "").strip()
    # parseInt와 같이 앞쪽의 정수 부분만 읽는다.
    digits = ""
    for index, char in enumerate(text):
        if char.isdigit() or (index == 0 and char in "+-"):
            digits += char
            continue
        break
    try:
        return max(0, int(digits))
    except ValueError:
        return 0


def wake_up_minutes(day: Any) -> int:
    """일자의 기상 시각을 분 단위로 반환합니다. 누락되었거나 잘못된 값이면 08:00입니다."""
    raw = getattr(day, "wake_up_time", None)
    if raw is None and isinstance(day, dict):
        raw = day.get("wakeUpTime")
    parsed = parse_time_to_minutes(raw)
    return parsed if parsed is not None else _DEFAULT_WAKE_UP_MINUTES


def _activities_of(day: Any) -> list[Any]:
    activities = getattr(day, "activities", None)
    if activities is None and isinstance(day, dict):
        activities = day.get("activities")
    return list(activities or [])


def _length_of(activity: Any) -> int:
    if isinstance(activity, dict):
        return coerce_length(activity.get("length"))
    return coerce_length(getattr(activity, "length", 0))


def compute_start_time(day: Any, activity_index: int) -> str:
    """활동의 표시용 시작 시각을 계산합니다.

    기상 시각에 `activity_index` 이전 활동들의 길이 합을 더합니다. 어떤 입력에도 예외를 던지지 않으며,
    범위를 벗어난 인덱스는 가능한 만큼만 누적합니다.

    Args:
        day: `Day` 모델 또는 같은 키를 가진 dict.
        activity_index: 대상 활동 인덱스 (0부터 시작).

    Returns:
        `8:00 AM` 형식의 시작 시각.
    """
    activities = _activities_of(day)
    try:
        upto = max(0, int(activity_index))
    except (TypeError, ValueError):
        upto = 0
    elapsed = sum(_length_of(activity) for activity in activities[:upto])
    return format_minutes_12h(wake_up_minutes(day) + elapsed)


def derive_start_times(day: Any) -> list[str]:
    """일자 내 모든 활동의 시작 시각 목록을 순서대로 반환합니다."""
    current = wake_up_minutes(day)
    start_times: list[str] = []
    for activity in _activities_of(day):
        start_times.append(format_minutes_12h(current))
        current += _length_of(activity)
    return start_times


def _ordinal(day_of_month: int) -> str:
    if 11 <= day_of_month % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day_of_month % 10, "th")
    return f"{day_of_month}{suffix}"


def format_display_date(start_date: date, day_index: int) -> str:
    """여행 시작일 기준 N번째 일자를 `Wednesday, January 1st 2025` 형식으로 반환합니다."""
    target = start_date + timedelta(days=day_index)
    return f"{target.strftime('%A, %B')} {_ordinal(target.day)} {target.year}"
