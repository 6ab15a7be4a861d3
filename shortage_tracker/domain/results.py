"""Explicit outcome values returned by tracker operations."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Outcome(str, Enum):
    OK = "ok"
    NO_CHANGE = "no_change"
    NOT_FOUND = "not_found"
    INVALID_INPUT = "invalid_input"
    DUPLICATE = "duplicate"
    FORBIDDEN = "forbidden"


@dataclass(frozen=True)
class OperationResult:
    """
    연산 결과.

    성공(OK)일 때만 참으로 평가되므로 ``if service.update_...(...)``
    형태의 불리언 호출부는 그대로 동작합니다.

    Attributes:
        outcome: 결과 구분
        affected: 생성/변경된 행 수
        message: 사용자에게 보여줄 수 있는 설명
    """

    outcome: Outcome
    affected: int = 0
    message: str = ""

    def __bool__(self) -> bool:
        return self.outcome is Outcome.OK

    @classmethod
    def ok(cls, affected: int = 0, message: str = "") -> "OperationResult":
        return cls(Outcome.OK, affected, message)

    @classmethod
    def fail(cls, outcome: Outcome, message: str = "") -> "OperationResult":
        return cls(outcome, 0, message)
