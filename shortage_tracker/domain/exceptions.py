"""
도메인 계층 예외 정의

업무상 예상 가능한 실패(행 없음, 사용자 중복 등)는 예외가 아니라
OperationResult 값으로 반환합니다. 이 모듈의 예외는 저장소 오류,
업로드 파일 손상처럼 호출자가 정상 흐름으로 처리할 수 없는 경우에만
사용합니다. UI 계층은 이 예외들을 잡아서 사용자 메시지로 변환합니다.
"""

from __future__ import annotations


class DomainError(Exception):
    """
    도메인 계층의 기본 예외 클래스.

    모든 도메인 예외는 이 클래스를 상속합니다.
    """

    pass


class ValidationError(DomainError):
    """
    데이터 검증 실패 시 발생하는 예외.

    저장된 문서의 구조가 기대와 다를 때 발생합니다.
    예: 컬렉션이 리스트가 아님, 레코드가 딕셔너리가 아님
    """

    pass


class DataLoadError(DomainError):
    """
    업로드 파일을 읽을 수 없을 때 발생하는 예외.

    엑셀/CSV 파싱 실패, 빈 파일 등에 사용합니다.
    """

    pass


class StorageError(DomainError):
    """
    저장소 읽기/쓰기 실패 시 발생하는 예외.

    JSON 파일 I/O, Google Sheets API 오류를 감쌉니다.
    """

    pass
