# entries/models.py
from django.db import models

ENTRY_FIELDS = ("rose", "thorn", "bud")


class Entry(models.Model):
    owner = models.ForeignKey("accounts.AppUser", on_delete=models.PROTECT, related_name="entries")
    date = models.DateField()
    rose = models.TextField(null=True, blank=True)   # 오늘 좋았던 일
    thorn = models.TextField(null=True, blank=True)  # 힘들었던 일
    bud = models.TextField(null=True, blank=True)    # 내일 기대되는 일

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-date", "-id"]
        constraints = [
            models.UniqueConstraint(fields=["owner", "date"], name="uq_entry_owner_date"),
        ]

    def __str__(self):
        return f"[{self.date}] entry (owner={self.owner_id})"

    def apply_fields(self, fields):
        """요청에 들어온 필드만 덮어쓴다 (없는 키는 그대로)"""
        for name in ENTRY_FIELDS:
            if name in fields:
                setattr(self, name, fields[name])
