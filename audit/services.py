# audit/services.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, Iterable, Optional
from uuid import UUID

from django.conf import settings

from .events import (
    AuditEvent,
    CreateEntryDetails,
    DeleteEntryDetails,
    LoginDetails,
    LoginFailedDetails,
    LogoutDetails,
    UpdateEntryDetails,
    ViewEntriesDetails,
    ViewEntryDetails,
    details_to_json,
)
from .middleware import extract_client_ip
from .models import AuditLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientInfo:
    source_ip: str
    user_agent: Optional[str] = None

    @classmethod
    def from_request(cls, request) -> "ClientInfo":
        # ClientIPMiddleware 를 안 탄 요청(테스트 RequestFactory 등)도 처리
        ip = getattr(request, "client_ip", None) or extract_client_ip(request.META)
        return cls(source_ip=ip, user_agent=request.META.get("HTTP_USER_AGENT") or None)


class AuditService:
    """
    감사 로그 저장.
    record() 하나가 실제 insert 이고, 나머지 log_* 는 액션별 details 모양을 고정해서
    record() 로 넘기는 래퍼.
    """

    def record(
        self,
        *,
        action: str,
        source_ip: str,
        actor_id: Optional[UUID] = None,
        user_agent: Optional[str] = None,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLog:
        return AuditLog.objects.create(
            actor_id=actor_id,
            action=action,
            source_ip=source_ip,
            user_agent=user_agent,
            resource_id=resource_id,
            details=details,
        )

    def emit(self, event: AuditEvent, client: ClientInfo) -> AuditLog:
        return self.record(
            action=event.action,
            source_ip=client.source_ip,
            actor_id=event.actor_id,
            user_agent=client.user_agent,
            resource_id=event.resource_id,
            details=details_to_json(event.details),
        )

    def log_login(self, user, client: ClientInfo) -> AuditLog:
        return self.emit(
            AuditEvent(LoginDetails(email=user.email, name=user.name), actor_id=user.id),
            client,
        )

    def log_login_failed(self, client: ClientInfo, reason: str, email: Optional[str] = None) -> AuditLog:
        return self.emit(AuditEvent(LoginFailedDetails(reason=reason, email=email)), client)

    def log_logout(self, user, client: ClientInfo) -> AuditLog:
        return self.emit(AuditEvent(LogoutDetails(), actor_id=user.id), client)

    def log_create_entry(self, actor_id: UUID, entry_date: date, client: ClientInfo,
                         fields_present: Iterable[str] = ()) -> AuditLog:
        details = CreateEntryDetails(entry_date=entry_date, fields_present=tuple(fields_present))
        return self.emit(AuditEvent.for_entry(actor_id, details), client)

    def log_update_entry(self, actor_id: UUID, entry_date: date, client: ClientInfo,
                         changes: Optional[Dict[str, Any]] = None) -> AuditLog:
        details = UpdateEntryDetails(entry_date=entry_date, changes=dict(changes or {}))
        return self.emit(AuditEvent.for_entry(actor_id, details), client)

    def log_delete_entry(self, actor_id: UUID, entry_date: date, client: ClientInfo) -> AuditLog:
        return self.emit(AuditEvent.for_entry(actor_id, DeleteEntryDetails(entry_date=entry_date)), client)

    def log_view_entry(self, actor_id: UUID, entry_date: date, client: ClientInfo) -> AuditLog:
        return self.emit(AuditEvent.for_entry(actor_id, ViewEntryDetails(entry_date=entry_date)), client)

    def log_view_entries(self, actor_id: UUID, client: ClientInfo, *, limit: int, offset: int,
                         total_returned: int) -> AuditLog:
        details = ViewEntriesDetails(limit=limit, offset=offset, total_returned=total_returned)
        return self.emit(AuditEvent(details, actor_id=actor_id), client)


class AuditRecorder:
    """
    HTTP 경계에서 감사 이벤트를 저장하는 어댑터.

    strict=True (기본, AUDIT_STRICT) 이면 저장 실패가 그대로 올라가서 요청이 실패한다.
    본 작업(엔트리 저장 등)은 이미 커밋된 상태일 수 있다.
    strict=False 이면 실패를 로그로만 남기고 응답은 정상 반환.
    """

    def __init__(self, service: Optional[AuditService] = None, strict: Optional[bool] = None):
        self.service = service or AuditService()
        self.strict = settings.AUDIT_STRICT if strict is None else strict

    def commit(self, event: AuditEvent, request) -> Optional[AuditLog]:
        client = ClientInfo.from_request(request)
        return self._apply(lambda: self.service.emit(event, client), event.action)

    def login(self, request, user) -> Optional[AuditLog]:
        client = ClientInfo.from_request(request)
        return self._apply(lambda: self.service.log_login(user, client), "LOGIN")

    def login_failed(self, request, reason: str, email: Optional[str] = None) -> Optional[AuditLog]:
        client = ClientInfo.from_request(request)
        return self._apply(lambda: self.service.log_login_failed(client, reason, email), "LOGIN_FAILED")

    def logout(self, request, user) -> Optional[AuditLog]:
        client = ClientInfo.from_request(request)
        return self._apply(lambda: self.service.log_logout(user, client), "LOGOUT")

    def _apply(self, write: Callable[[], AuditLog], action: str) -> Optional[AuditLog]:
        if self.strict:
            return write()
        try:
            return write()
        except Exception:
            logger.exception("audit write failed action=%s (best-effort mode)", action)
            return None
