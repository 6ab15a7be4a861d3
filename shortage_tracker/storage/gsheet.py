"""
Google Sheets 저장소

문서의 네 컬렉션을 같은 스프레드시트의 워크시트 네 개에 저장합니다.

- Users_Roles
- ERP_Raw_Data
- Tracking_Schedule
- Reference_Data

각 워크시트의 첫 행은 camelCase 필드명 헤더입니다.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import gspread
from google.oauth2.service_account import Credentials

from shortage_tracker.common.performance import measure_time_context
from shortage_tracker.domain.exceptions import StorageError
from shortage_tracker.domain.models import (
    ERPRawRow,
    ReferenceRow,
    TrackingRow,
    UserRoleRow,
)

from .base import Document

logger = logging.getLogger(__name__)

SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive.readonly",
]

# 컬렉션 키 → (워크시트 이름, 레코드 클래스)
WORKSHEETS: dict[str, tuple[str, type]] = {
    "usersRoles": ("Users_Roles", UserRoleRow),
    "erpRawData": ("ERP_Raw_Data", ERPRawRow),
    "trackingSchedule": ("Tracking_Schedule", TrackingRow),
    "referenceData": ("Reference_Data", ReferenceRow),
}


def _header_for(record_cls: type) -> list[str]:
    return list(record_cls().to_dict().keys())


def _cell(value: Any) -> Any:
    # 시트에는 문자열/숫자/불리언만 기록
    if value is None:
        return ""
    return value


class GSheetStorage:
    """
    gspread 스프레드시트 기반 저장소.

    Args:
        spreadsheet: gspread.Spreadsheet (테스트에서는 같은 인터페이스의 객체)

    Examples:
        >>> storage = GSheetStorage.from_service_account(sheet_id, credentials_info)
        >>> document = storage.load()
    """

    def __init__(self, spreadsheet: Any) -> None:
        self.spreadsheet = spreadsheet

    @classmethod
    def from_service_account(
        cls,
        gsheet_id: str,
        credentials_info: Mapping[str, Any] | str,
    ) -> "GSheetStorage":
        """
        서비스 계정 정보로 인증하여 저장소를 생성합니다.

        Args:
            gsheet_id: 스프레드시트 문서 ID
            credentials_info: 서비스 계정 JSON (dict 또는 JSON 문자열)

        Raises:
            StorageError: 인증 또는 문서 열기 실패
        """
        if not gsheet_id:
            raise StorageError("Google Sheets 문서 ID가 설정되지 않았습니다.")

        if isinstance(credentials_info, str):
            info = json.loads(credentials_info)
        else:
            info = dict(credentials_info)

        if "private_key" in info:
            info["private_key"] = info["private_key"].replace("\\n", "\n").strip()

        try:
            credentials = Credentials.from_service_account_info(info, scopes=SCOPES)
            client = gspread.authorize(credentials)
            spreadsheet = client.open_by_key(gsheet_id)
        except Exception as exc:
            logger.error(f"Google Sheets authentication failed: {exc}", exc_info=True)
            raise StorageError(f"Google Sheets 인증 실패: {exc}") from exc

        return cls(spreadsheet)

    def _worksheet(self, title: str, *, create: bool, cols: int = 26) -> Optional[Any]:
        try:
            return self.spreadsheet.worksheet(title)
        except gspread.exceptions.WorksheetNotFound:
            if not create:
                return None
            logger.info("Creating worksheet %s", title)
            return self.spreadsheet.add_worksheet(title=title, rows=100, cols=cols)

    def load(self) -> Optional[Document]:
        document: Document = {}
        found = False

        with measure_time_context("Google Sheets load"):
            for key, (title, _) in WORKSHEETS.items():
                try:
                    ws = self._worksheet(title, create=False)
                    if ws is None:
                        document[key] = []
                        continue
                    found = True
                    document[key] = ws.get_all_records(numericise_ignore=["all"])
                except gspread.exceptions.APIError as exc:
                    logger.error(f"Failed to read worksheet {title}: {exc}")
                    raise StorageError(f"{title} 시트를 읽을 수 없습니다: {exc}") from exc

        if not found:
            logger.debug("No tracker worksheets found in spreadsheet")
            return None
        logger.debug(
            "Loaded %s tracking rows from Google Sheets",
            len(document.get("trackingSchedule", [])),
        )
        return document

    def _prepare(self, title: str, n_rows: int, n_cols: int) -> Any:
        ws = self._worksheet(title, create=True, cols=n_cols)
        if ws.row_count < n_rows:
            ws.add_rows(n_rows - ws.row_count)
        if ws.col_count < n_cols:
            ws.add_cols(n_cols - ws.col_count)
        return ws

    def save(self, document: Document) -> None:
        """
        네 워크시트를 한 번의 values batchUpdate 요청으로 덮어씁니다.

        워크시트 준비(생성/크기 조정)가 먼저 끝난 뒤 값을 기록하므로,
        요청이 실패하면 어느 시트의 값도 바뀌지 않습니다.
        기존 행보다 짧아진 부분은 빈 문자열로 채워 지웁니다.
        """
        with measure_time_context("Google Sheets save"):
            data = []
            for key, (title, record_cls) in WORKSHEETS.items():
                header = _header_for(record_cls)
                records = document.get(key) or []
                values = [header] + [
                    [_cell(record.get(name)) for name in header] for record in records
                ]
                try:
                    ws = self._prepare(title, len(values), len(header))
                except gspread.exceptions.APIError as exc:
                    logger.error(f"Failed to prepare worksheet {title}: {exc}")
                    raise StorageError(f"{title} 시트를 준비할 수 없습니다: {exc}") from exc

                blank = [""] * len(header)
                values += [list(blank) for _ in range(ws.row_count - len(values))]
                data.append({"range": f"'{title}'!A1", "values": values})

            try:
                self.spreadsheet.values_batch_update(
                    {"valueInputOption": "RAW", "data": data}
                )
            except gspread.exceptions.APIError as exc:
                logger.error(f"Failed to write tracker worksheets: {exc}")
                raise StorageError(f"시트에 쓸 수 없습니다: {exc}") from exc
