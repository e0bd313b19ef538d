import uuid

from django.db import models


class AppUser(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    external_id = models.CharField(max_length=255, unique=True, db_index=True)  # Google sub
    email = models.EmailField()
    name = models.CharField(max_length=255)
    avatar_url = models.URLField(max_length=1024, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"{self.name} <{self.email}>"

    # DRF IsAuthenticated 가 request.user.is_authenticated 를 본다
    @property
    def is_authenticated(self):
        return True

    @property
    def is_anonymous(self):
        return False
