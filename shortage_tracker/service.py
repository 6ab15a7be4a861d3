"""
결품 추적 서비스 (Access Layer)

화면 계층이 호출하는 읽기/쓰기 진입점입니다. 각 쓰기 연산은
TrackingRepository 트랜잭션 안에서 읽기-수정-저장을 끝까지 수행하고,
실패하면 문서를 건드리지 않은 채 OperationResult로 사유를 반환합니다.

role 인자를 넘기면 해당 역할의 권한을 검사합니다. 권한이 없으면
FORBIDDEN 결과를 반환하며 아무것도 변경하지 않습니다.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from shortage_tracker.common.performance import measure_time_context
from shortage_tracker.core.config import BUILTIN_ADMIN, CONFIG
from shortage_tracker.core.status import LatePolicy
from shortage_tracker.domain.models import ERPRawRow, TrackingRow, UserRole, UserRoleRow
from shortage_tracker.domain.normalization import clean_text
from shortage_tracker.domain.permissions import Capability, has_capability
from shortage_tracker.domain.results import OperationResult, Outcome
from shortage_tracker.reconcile import (
    ImportPolicy,
    ShortageRecord,
    WorkOrderRecord,
    import_shortages,
    import_work_orders,
    record_raw_batch,
    set_delivery_date,
    set_model_archived,
    set_purchaser_remark,
    set_stage_date,
    set_stage_ready,
)
from shortage_tracker.storage import TrackingRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoginResult:
    user: UserRoleRow
    role: UserRole


class SheetService:
    """
    결품 추적 서비스.

    Args:
        repository: 문서를 소유하는 저장소
        late_policy: 지연(Late) 판정 함수. 없으면 Late는 만들어지지 않습니다.

    Examples:
        >>> service = SheetService(TrackingRepository(MemoryStorage()))
        >>> service.import_wo_details([{"workOrder": "WO-1", "model": "ModelA"}])
        OperationResult(outcome=<Outcome.OK: 'ok'>, affected=1, message='')
        >>> rows = service.search_tracking()
    """

    def __init__(
        self,
        repository: TrackingRepository,
        *,
        late_policy: Optional[LatePolicy] = None,
    ) -> None:
        self.repository = repository
        self.late_policy = late_policy

    # ========================================
    # 내부 헬퍼
    # ========================================

    @staticmethod
    def _forbidden(role: Any, capability: Capability, operation: str) -> Optional[OperationResult]:
        if role is None or has_capability(role, capability):
            return None
        logger.warning("Role %s is not allowed to %s", role, operation)
        return OperationResult.fail(Outcome.FORBIDDEN, f"{operation} 권한이 없습니다.")

    def _mutate(
        self,
        operation: str,
        change: Callable[..., OperationResult],
        *args: Any,
    ) -> OperationResult:
        with self.repository.transaction() as tx:
            result = change(tx.db, *args)
            if not result:
                tx.discard()

        if result:
            logger.info("%s: %s rows changed", operation, result.affected)
        else:
            logger.info("%s rejected: %s (%s)", operation, result.outcome.value, result.message)
        return result

    # ========================================
    # 인증 / 조회
    # ========================================

    def login(self, username: str) -> Optional[LoginResult]:
        """
        사용자명(대소문자 무시)으로 역할을 조회합니다. 비밀번호는 확인하지 않습니다.

        Returns:
            LoginResult 또는 일치하는 사용자가 없으면 None
        """
        target = clean_text(username).casefold()
        if not target:
            return None
        for user in self.repository.snapshot().users_roles:
            if user.username.casefold() == target:
                role = UserRole.parse(user.role)
                if role is None:
                    logger.warning("User %s has unknown role %s", user.username, user.role)
                    return None
                logger.info("User %s logged in as %s", user.username, role.value)
                return LoginResult(user=user, role=role)
        logger.info("Login failed for %s", username)
        return None

    def search_tracking(self, query: str = "") -> list[TrackingRow]:
        """
        전체 추적 행을 반환합니다. query는 현재 사용하지 않습니다.

        다른 세션의 변경을 반영하기 위해 저장소를 다시 읽은 뒤 응답하며,
        반환 값은 복사본입니다.
        """
        self.repository.reload()
        return self.repository.snapshot().tracking_schedule

    def get_all_erp(self) -> list[ERPRawRow]:
        return self.repository.snapshot().erp_raw_data

    def get_users(self) -> list[UserRoleRow]:
        return self.repository.snapshot().users_roles

    # ========================================
    # 행 변경
    # ========================================

    def update_delivery_date(self, row_id: str, new_date: Any, *, role: Any = None) -> OperationResult:
        denied = self._forbidden(role, Capability.REPLY, "update delivery date")
        if denied:
            return denied
        return self._mutate(
            "update_delivery_date", set_delivery_date, row_id, new_date, self.late_policy
        )

    def update_purchaser_remark(self, row_id: str, remark: Any, *, role: Any = None) -> OperationResult:
        denied = self._forbidden(role, Capability.REPLY, "update purchaser remark")
        if denied:
            return denied
        return self._mutate("update_purchaser_remark", set_purchaser_remark, row_id, remark)

    def update_stage_date(
        self,
        work_order: str,
        stage: str,
        new_date: Any,
        *,
        role: Any = None,
    ) -> OperationResult:
        denied = self._forbidden(role, Capability.SCHEDULE, "update stage date")
        if denied:
            return denied
        return self._mutate(
            "update_stage_date", set_stage_date, work_order, stage, new_date, self.late_policy
        )

    def update_stage_ready(
        self,
        work_order: str,
        stage: str,
        is_ready: bool,
        *,
        role: Any = None,
    ) -> OperationResult:
        denied = self._forbidden(role, Capability.SCHEDULE, "update stage readiness")
        if denied:
            return denied
        return self._mutate(
            "update_stage_ready", set_stage_ready, work_order, stage, is_ready, self.late_policy
        )

    def archive_model(self, model: str, is_archived: bool, *, role: Any = None) -> OperationResult:
        denied = self._forbidden(role, Capability.ARCHIVE, "archive model")
        if denied:
            return denied
        return self._mutate("archive_model", set_model_archived, model, is_archived)

    # ========================================
    # 가져오기
    # ========================================

    def import_wo_details(
        self,
        records: Iterable[Mapping[str, Any]],
        *,
        role: Any = None,
    ) -> OperationResult:
        """
        작업지시 메타데이터를 가져옵니다.

        Returns:
            행이 하나라도 생성/갱신되면 OK (저장),
            아니면 NO_CHANGE (저장하지 않음)
        """
        denied = self._forbidden(role, Capability.IMPORT, "import work orders")
        if denied:
            return denied

        parsed = [WorkOrderRecord.from_mapping(r) for r in records]
        valid = [r for r in parsed if r.work_order]
        if len(valid) < len(parsed):
            logger.warning("Skipped %s work order records without work order", len(parsed) - len(valid))

        with measure_time_context(f"work order import ({len(valid)} records)"):
            with self.repository.transaction() as tx:
                created, updated = import_work_orders(tx.db, valid, tx.new_id)
                if created + updated == 0:
                    tx.discard()

        if created + updated == 0:
            logger.info("Work order import made no changes")
            return OperationResult.fail(Outcome.NO_CHANGE, "변경된 작업지시가 없습니다.")

        logger.info("Work order import: %s skeletons created, %s rows updated", created, updated)
        return OperationResult.ok(
            created + updated, f"신규 {created}건, 갱신 {updated}건"
        )

    def import_shortages(
        self,
        records: Iterable[Mapping[str, Any]],
        policy: ImportPolicy | str = ImportPolicy.REPLACE,
        *,
        work_orders: Sequence[str] = (),
        role: Any = None,
    ) -> OperationResult:
        """
        결품 리스트를 가져옵니다.

        Args:
            records: 결품 레코드
            policy: "replace"(전체 교체) 또는 "merge"(병합)
            work_orders: 레코드가 없어도 대상에 포함할 작업지시
            role: 요청자 역할 (권한 검사용)

        Returns:
            권한이 있으면 항상 OK
        """
        denied = self._forbidden(role, Capability.IMPORT, "import shortages")
        if denied:
            return denied

        policy = ImportPolicy.parse(policy)
        parsed = [ShortageRecord.from_mapping(r) for r in records]
        valid = [r for r in parsed if r.work_order]
        if len(valid) < len(parsed):
            logger.warning("Skipped %s shortage records without work order", len(parsed) - len(valid))
        extra = [clean_text(wo) for wo in work_orders]

        batch_label = f"{CONFIG.imports.upload_batch_prefix}-{datetime.now():%Y%m%d%H%M%S}"

        with measure_time_context(f"{policy.value} shortage import ({len(valid)} records)"):
            with self.repository.transaction() as tx:
                summary = import_shortages(tx.db, valid, tx.new_id, policy, work_orders=extra)
                record_raw_batch(tx.db, valid, tx.new_id, batch_label)

        logger.info(
            "Shortage import (%s): %s work orders, %s created, %s updated, %s removed, %s resolved",
            policy.value,
            summary.work_orders,
            summary.created,
            summary.updated,
            summary.removed,
            summary.resolved,
        )
        return OperationResult.ok(
            summary.created + summary.updated + summary.resolved,
            f"작업지시 {summary.work_orders}건 처리",
        )

    # ========================================
    # 사용자 관리
    # ========================================

    def add_user(self, user: UserRoleRow | Mapping[str, Any], *, role: Any = None) -> OperationResult:
        denied = self._forbidden(role, Capability.MANAGE_USERS, "add user")
        if denied:
            return denied

        if not isinstance(user, UserRoleRow):
            user = UserRoleRow.from_dict(user)
        username = clean_text(user.username)
        parsed_role = UserRole.parse(user.role)
        if not username or parsed_role is None:
            return OperationResult.fail(Outcome.INVALID_INPUT, "사용자명과 역할을 확인하세요.")

        def _add(db, new_user: UserRoleRow) -> OperationResult:
            if any(u.username.casefold() == new_user.username.casefold() for u in db.users_roles):
                return OperationResult.fail(Outcome.DUPLICATE, f"이미 존재하는 사용자입니다: {new_user.username}")
            db.users_roles.append(new_user)
            return OperationResult.ok(1)

        return self._mutate("add_user", _add, UserRoleRow(username=username, role=parsed_role.value))

    def delete_user(self, username: str, *, role: Any = None) -> OperationResult:
        denied = self._forbidden(role, Capability.MANAGE_USERS, "delete user")
        if denied:
            return denied

        if clean_text(username).casefold() == BUILTIN_ADMIN:
            return OperationResult.fail(Outcome.INVALID_INPUT, "기본 관리자 계정은 삭제할 수 없습니다.")

        def _delete(db, name: str) -> OperationResult:
            before = len(db.users_roles)
            db.users_roles = [u for u in db.users_roles if u.username != name]
            removed = before - len(db.users_roles)
            if removed == 0:
                return OperationResult.fail(Outcome.NOT_FOUND, f"사용자를 찾을 수 없습니다: {name}")
            return OperationResult.ok(removed)

        return self._mutate("delete_user", _delete, username)

    def reset(self, *, role: Any = None) -> OperationResult:
        """문서를 초기 상태(기본 사용자만 있는 상태)로 되돌립니다."""
        denied = self._forbidden(role, Capability.MANAGE_USERS, "reset database")
        if denied:
            return denied
        self.repository.reset()
        return OperationResult.ok()
