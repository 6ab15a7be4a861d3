"""
입력 정규화 유틸리티

스프레드시트 파싱 결과는 필드 존재 여부나 타입이 보장되지 않으므로,
가져오기 로직이 읽는 모든 값은 이 모듈의 함수로 정리합니다.
NaN/None은 빈 문자열, 수량은 0 이상의 정수, 날짜는 ISO(YYYY-MM-DD)
문자열로 통일합니다.
"""

from __future__ import annotations

import logging
import math
import re
from datetime import date, timedelta
from typing import Any, Optional

from shortage_tracker.core.config import CONFIG, DEFAULT_STAGE, STAGE_ALIAS, STAGES

logger = logging.getLogger(__name__)

_ISO_DATE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# 엑셀 날짜 일련번호의 기준일 (1899-12-30 = 0)
_EXCEL_EPOCH = date(1899, 12, 30)

_STAGE_LOOKUP = {stage.casefold(): stage for stage in STAGES}
_STAGE_LOOKUP.update({alias.casefold(): stage for alias, stage in STAGE_ALIAS.items()})


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    # pandas.NA / NaT 는 자기 자신과 비교가 불가능
    try:
        return bool(value != value)
    except TypeError:
        return True


def clean_text(value: Any) -> str:
    """
    임의의 값을 공백이 제거된 문자열로 변환합니다.

    Examples:
        >>> clean_text("  WO-1 ")
        'WO-1'
        >>> clean_text(float("nan"))
        ''
        >>> clean_text(12345.0)
        '12345'
    """
    if _is_missing(value):
        return ""
    if isinstance(value, float) and value.is_integer():
        # 엑셀에서 숫자형으로 읽힌 작업지시/부품번호
        return str(int(value))
    text = str(value).strip()
    if text.casefold() in {"nan", "none", "null", "<na>", "nat"}:
        return ""
    return text


def coerce_quantity(value: Any) -> int:
    """
    결품 수량을 0 이상의 정수로 변환합니다.

    천 단위 콤마를 제거하며, 변환할 수 없으면 0을 반환합니다.

    Examples:
        >>> coerce_quantity("1,234")
        1234
        >>> coerce_quantity(-3)
        0
    """
    text = clean_text(value).replace(",", "")
    if not text:
        return 0
    try:
        qty = int(float(text))
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(qty, 0)


def normalize_stage(value: Any) -> str:
    """
    공정 표기를 표준 공정명(SMT/Assembly/Packing)으로 변환합니다.

    값이 없거나 알 수 없는 표기면 기본 공정(SMT)을 반환합니다.

    Examples:
        >>> normalize_stage("組裝")
        'Assembly'
        >>> normalize_stage(" packing ")
        'Packing'
        >>> normalize_stage(None)
        'SMT'
        >>> normalize_stage("Paint")
        'SMT'
    """
    text = clean_text(value)
    if not text:
        return DEFAULT_STAGE
    stage = lookup_stage(text)
    if stage is None:
        logger.warning(f"Unknown stage label {text!r}, using {DEFAULT_STAGE}")
        return DEFAULT_STAGE
    return stage


def lookup_stage(value: Any) -> Optional[str]:
    """표준 공정명 또는 별칭이면 표준 공정명, 아니면 None"""
    return _STAGE_LOOKUP.get(clean_text(value).casefold())


def is_known_stage(value: Any) -> bool:
    return clean_text(value) in STAGES


def model_key(value: Any) -> str:
    """모델명 비교용 키 (공백 제거 + 대소문자 무시)"""
    return clean_text(value).casefold()


def normalize_date_input(value: Any) -> str:
    """
    다양한 날짜 표기를 ISO(YYYY-MM-DD) 문자열로 변환합니다.

    지원 형식:
    - 엑셀 날짜 일련번호 (20000 초과)
    - YYYY/M/D, M/D/YYYY
    - YYYY-MM-DD
    - date / datetime / Timestamp 객체

    변환할 수 없으면 빈 문자열을 반환합니다.

    Examples:
        >>> normalize_date_input("45292")
        '2024-01-01'
        >>> normalize_date_input("2024/1/5")
        '2024-01-05'
        >>> normalize_date_input("1/5/2024")
        '2024-01-05'
    """
    if _is_missing(value):
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")

    text = clean_text(value)
    if not text:
        return ""

    serial = _parse_number(text)
    if serial is not None:
        if serial > CONFIG.imports.excel_serial_threshold:
            try:
                return (_EXCEL_EPOCH + timedelta(days=int(serial))).isoformat()
            except OverflowError:
                return ""
        return ""

    # "2024-01-05 00:00:00" 처럼 시간이 붙은 문자열
    head = text.split(" ")[0].split("T")[0]

    if "/" in head:
        parts = head.split("/")
        if len(parts) == 3:
            if len(parts[0]) == 4:
                year, month, day = parts
            elif len(parts[2]) == 4:
                month, day, year = parts
            else:
                return ""
            return _safe_iso(year, month, day)
        return ""

    if _ISO_DATE.match(head):
        return _safe_iso(*head.split("-"))
    return ""


def _parse_number(text: str) -> Optional[float]:
    try:
        return float(text)
    except ValueError:
        return None


def _safe_iso(year: str, month: str, day: str) -> str:
    try:
        return date(int(year), int(month), int(day)).isoformat()
    except ValueError:
        return ""


def format_short_date(value: Any) -> str:
    """
    카드/테이블 표시용 MM/DD 문자열을 반환합니다.

    값이 없으면 "-", 정규화할 수 없으면 원본 문자열을 그대로 반환합니다.
    """
    if not clean_text(value):
        return "-"
    normalized = normalize_date_input(value)
    if not normalized:
        return clean_text(value)
    _, month, day = normalized.split("-")
    return f"{month}/{day}"
