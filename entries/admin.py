# entries/admin.py
from django.contrib import admin
from .models import Entry

@admin.register(Entry)
class EntryAdmin(admin.ModelAdmin):
    list_display = ("id", "owner", "date", "created_at")
    list_filter = ("date",)
    search_fields = ("rose", "thorn", "bud")
