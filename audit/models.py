# audit/models.py
from django.db import models


class AuditLogImmutable(Exception):
    """감사 로그는 append-only: 수정/삭제 불가"""


class AuditAction(models.TextChoices):
    LOGIN = "LOGIN", "Login"
    LOGOUT = "LOGOUT", "Logout"
    LOGIN_FAILED = "LOGIN_FAILED", "Login failed"
    CREATE_ENTRY = "CREATE_ENTRY", "Create entry"
    UPDATE_ENTRY = "UPDATE_ENTRY", "Update entry"
    DELETE_ENTRY = "DELETE_ENTRY", "Delete entry"
    VIEW_ENTRY = "VIEW_ENTRY", "View entry"
    VIEW_ENTRIES = "VIEW_ENTRIES", "View entries"


class AuditLog(models.Model):
    # 알 수 없는 계정의 로그인 실패는 actor 없음
    actor = models.ForeignKey(
        "accounts.AppUser",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="audit_logs",
    )
    action = models.CharField(max_length=32, choices=AuditAction.choices)
    timestamp = models.DateTimeField(auto_now_add=True, db_index=True)
    source_ip = models.CharField(max_length=45)  # IPv6 까지
    user_agent = models.TextField(null=True, blank=True)
    resource_id = models.CharField(max_length=64, null=True, blank=True)  # 엔트리 액션이면 날짜 문자열
    details = models.JSONField(null=True, blank=True)

    class Meta:
        ordering = ["-timestamp", "-id"]
        indexes = [
            models.Index(fields=["actor", "action"], name="idx_audit_actor_action"),
        ]

    def __str__(self):
        return f"[{self.timestamp:%Y-%m-%d %H:%M:%S}] {self.action} (actor={self.actor_id})"

    def save(self, *args, **kwargs):
        if self.pk is not None and not self._state.adding:
            raise AuditLogImmutable("audit log rows cannot be modified")
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise AuditLogImmutable("audit log rows cannot be deleted")
