# entries/serializers.py
from collections.abc import Mapping

from django.conf import settings
from rest_framework import serializers
from .models import ENTRY_FIELDS, Entry

AT_LEAST_ONE_FIELD = "At least one field (rose, thorn, or bud) must have a value"
UNKNOWN_FIELD = "This field is not allowed."


def _text_field():
    # 원문 그대로 저장 (trim 은 검증에만 사용)
    return serializers.CharField(required=False, allow_null=True, allow_blank=True, trim_whitespace=False)


def has_any_field(attrs) -> bool:
    return any((attrs.get(name) or "").strip() for name in ENTRY_FIELDS)


class EntryUpdateSerializer(serializers.Serializer):
    rose = _text_field()
    thorn = _text_field()
    bud = _text_field()

    def validate(self, attrs):
        # 정의되지 않은 키는 조용히 버리지 않고 400
        if isinstance(self.initial_data, Mapping):
            unknown = sorted(set(self.initial_data) - set(self.fields))
            if unknown:
                raise serializers.ValidationError({name: UNKNOWN_FIELD for name in unknown})
        if not has_any_field(attrs):
            raise serializers.ValidationError(AT_LEAST_ONE_FIELD)
        return attrs


class EntryWriteSerializer(EntryUpdateSerializer):
    """create / upsert 입력. date 가 없으면 서버 로컬 날짜."""
    date = serializers.DateField(required=False, input_formats=["%Y-%m-%d"])


class EntrySerializer(serializers.ModelSerializer):
    class Meta:
        model = Entry
        fields = ["id", "date", "rose", "thorn", "bud", "created_at", "updated_at"]


class EntryPageSerializer(serializers.Serializer):
    entries = EntrySerializer(many=True)
    total = serializers.IntegerField()


class EntryListQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(required=False, min_value=1)
    offset = serializers.IntegerField(required=False, min_value=0, default=0)

    def validate_limit(self, value):
        if value > settings.ENTRIES_MAX_PAGE_SIZE:
            raise serializers.ValidationError(
                f"Ensure this value is less than or equal to {settings.ENTRIES_MAX_PAGE_SIZE}."
            )
        return value


class DeleteResultSerializer(serializers.Serializer):
    success = serializers.BooleanField()
