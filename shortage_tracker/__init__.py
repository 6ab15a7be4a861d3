"""
생산 일정 결품(欠料) 추적 패키지

작업지시(工單) 메타데이터와 부품 결품 리스트를 스프레드시트로 가져와
공정(SMT/Assembly/Packing)별 자재 준비 상태, 구매 회신, 출하일을
모델 단위로 추적합니다.

구성:
- domain: 데이터 모델, 정규화, 필터, 권한
- reconcile: 가져오기 병합 로직과 행 변경 연산
- storage: 저장소 추상화 (JSON 파일 / Google Sheets / 메모리)
- data_sources: 엑셀 업로드 파싱 및 내보내기
- ui: Streamlit 화면
"""

from __future__ import annotations

__version__ = "1.0.0"
