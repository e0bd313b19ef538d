# entries/views.py
import datetime

from django.utils import timezone
from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework import viewsets, status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response

from audit.models import AuditAction
from audit.services import AuditRecorder
from .serializers import (
    DeleteResultSerializer,
    EntryListQuerySerializer,
    EntryPageSerializer,
    EntrySerializer,
    EntryUpdateSerializer,
    EntryWriteSerializer,
)
from .services import build_entry_service


def parse_entry_date(raw: str) -> datetime.date:
    try:
        return datetime.date.fromisoformat(raw)
    except ValueError:
        raise ValidationError({"date": ["Date must be a valid calendar date (YYYY-MM-DD)."]})


class EntryViewSet(viewsets.ViewSet):
    """
    /api/entries 하위 전부.
    엔트리는 항상 (로그인 유저, 날짜) 로만 찾는다. pk 로 조회하는 경로 없음.
    """
    lookup_field = "date"
    lookup_value_regex = r"\d{4}-\d{2}-\d{2}"

    def get_service(self):
        return build_entry_service()

    def get_audit(self):
        return AuditRecorder()

    @extend_schema(
        parameters=[
            OpenApiParameter("limit", int, required=False),
            OpenApiParameter("offset", int, required=False),
        ],
        responses=EntryPageSerializer,
    )
    def list(self, request):
        query = EntryListQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)

        page, event = self.get_service().find_all(
            request.user.id,
            limit=query.validated_data.get("limit"),
            offset=query.validated_data["offset"],
        )
        self.get_audit().commit(event, request)
        return Response(EntryPageSerializer(page).data)

    @extend_schema(request=EntryWriteSerializer, responses={201: EntrySerializer})
    def create(self, request):
        ser = EntryWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        fields = dict(ser.validated_data)
        entry_date = fields.pop("date", None) or timezone.localdate()

        entry, event = self.get_service().create(request.user.id, entry_date, fields)
        self.get_audit().commit(event, request)
        return Response(EntrySerializer(entry).data, status=status.HTTP_201_CREATED)

    @extend_schema(request=EntryWriteSerializer, responses={200: EntrySerializer, 201: EntrySerializer})
    @action(detail=False, methods=["POST"], url_path="upsert")
    def upsert(self, request):
        """날짜에 엔트리가 있으면 병합, 없으면 생성 (409 없음)"""
        ser = EntryWriteSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        fields = dict(ser.validated_data)
        entry_date = fields.pop("date", None) or timezone.localdate()

        entry, event = self.get_service().create_or_update(request.user.id, entry_date, fields)
        self.get_audit().commit(event, request)

        created = event.action == AuditAction.CREATE_ENTRY
        return Response(
            EntrySerializer(entry).data,
            status=status.HTTP_201_CREATED if created else status.HTTP_200_OK,
        )

    @extend_schema(responses=EntrySerializer)
    def retrieve(self, request, date=None):
        entry, event = self.get_service().find_one(request.user.id, parse_entry_date(date))
        self.get_audit().commit(event, request)
        return Response(EntrySerializer(entry).data)

    @extend_schema(request=EntryUpdateSerializer, responses=EntrySerializer)
    def partial_update(self, request, date=None):
        entry_date = parse_entry_date(date)
        ser = EntryUpdateSerializer(data=request.data)
        ser.is_valid(raise_exception=True)

        entry, event = self.get_service().update(request.user.id, entry_date, ser.validated_data)
        self.get_audit().commit(event, request)
        return Response(EntrySerializer(entry).data)

    @extend_schema(responses=DeleteResultSerializer)
    def destroy(self, request, date=None):
        result, event = self.get_service().remove(request.user.id, parse_entry_date(date))
        self.get_audit().commit(event, request)
        return Response(result, status=status.HTTP_200_OK)
