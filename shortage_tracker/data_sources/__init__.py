"""
스프레드시트 경계 계층

업로드된 엑셀/CSV 파일을 가져오기 레코드로 변환하고,
추적 행을 엑셀로 내보냅니다.
"""

from .excel import export_tracking, parse_shortages, parse_wo_details, read_table

__all__ = [
    "read_table",
    "parse_wo_details",
    "parse_shortages",
    "export_tracking",
]
