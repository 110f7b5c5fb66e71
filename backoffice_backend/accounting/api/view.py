# PATH: accounting/api/view.py

"""
PATH: accounting/api/view.py

JOURNAL ENTRY API VIEWSET

Read:
    GET /api/accounting/journal-entries/
        ?status=posted&reference_type=invoice&branch=china_town
        &date_from=2026-01-01&date_to=2026-01-31&account=1111
    GET /api/accounting/journal-entries/<id>/
    GET /api/accounting/journal-entries/next-number/

Write (all through journal_entry_service):
    POST   /api/accounting/journal-entries/               manual entry
    POST   /api/accounting/journal-entries/<id>/reverse/
    DELETE /api/accounting/journal-entries/<id>/          corrective delete

Security rules:
- list / retrieve / next-number require accounting.view_journalentry
- manual create requires accounting.add_journalentry
- reverse requires accounting.change_journalentry
- delete requires accounting.delete_journalentry
"""

import django_filters
from django_filters.rest_framework import DjangoFilterBackend
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import PermissionDenied
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import ReadOnlyModelViewSet

from accounting.api.errors import forbidden, service_error_response
from accounting.api.serializers import (
    JournalEntrySerializer,
    ManualJournalEntryCreateSerializer,
    ReverseEntrySerializer,
)
from accounting.models.journal import JournalEntry
from accounting.services.exceptions import AccountingServiceError
from accounting.services.journal_entry_service import (
    create_entry,
    delete_entry,
    get_entry,
    next_entry_number,
    reverse_entry,
)


class JournalEntryFilter(django_filters.FilterSet):
    date_from = django_filters.DateFilter(field_name="entry_date", lookup_expr="gte")
    date_to = django_filters.DateFilter(field_name="entry_date", lookup_expr="lte")
    account = django_filters.CharFilter(field_name="postings__account__code", distinct=True)

    class Meta:
        model = JournalEntry
        fields = ["status", "reference_type", "reference_id", "branch", "period"]


@extend_schema(tags=["accounting"])
class JournalEntryViewSet(ReadOnlyModelViewSet):
    permission_classes = [IsAuthenticated]
    serializer_class = JournalEntrySerializer
    http_method_names = ["get", "post", "delete", "head", "options"]
    filter_backends = [DjangoFilterBackend]
    filterset_class = JournalEntryFilter

    queryset = JournalEntry.objects.prefetch_related("postings__account").order_by("-entry_date", "-entry_number")

    def get_queryset(self):
        if not self.request.user.has_perm("accounting.view_journalentry"):
            raise PermissionDenied("You do not have permission to view journal entries.")
        return super().get_queryset()

    @extend_schema(request=ManualJournalEntryCreateSerializer, responses={201: JournalEntrySerializer})
    def create(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.add_journalentry"):
            return forbidden("You do not have permission to create journal entries.")

        s = ManualJournalEntryCreateSerializer(data=request.data)
        s.is_valid(raise_exception=True)
        data = s.validated_data

        try:
            entry = create_entry(
                description=data["description"],
                entry_date=data.get("entry_date"),
                postings=[dict(p) for p in data["postings"]],
                branch=data.get("branch", ""),
                actor_id=request.user.pk,
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(get_entry(entry.pk)).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        if not request.user.has_perm("accounting.delete_journalentry"):
            return forbidden("You do not have permission to delete journal entries.")

        try:
            number = delete_entry(entry_id=kwargs.get("pk"), actor_id=request.user.pk)
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response({"deleted_entry_number": number}, status=status.HTTP_200_OK)

    @extend_schema(request=ReverseEntrySerializer, responses={201: JournalEntrySerializer})
    @action(detail=True, methods=["post"])
    def reverse(self, request, pk=None):
        if not request.user.has_perm("accounting.change_journalentry"):
            return forbidden("You do not have permission to reverse journal entries.")

        s = ReverseEntrySerializer(data=request.data)
        s.is_valid(raise_exception=True)

        try:
            reversal = reverse_entry(
                entry_id=pk,
                actor_id=request.user.pk,
                entry_date=s.validated_data.get("entry_date"),
            )
        except AccountingServiceError as exc:
            return service_error_response(exc)

        return Response(JournalEntrySerializer(get_entry(reversal.pk)).data, status=status.HTTP_201_CREATED)

    @extend_schema(responses={200: dict})
    @action(detail=False, methods=["get"], url_path="next-number")
    def next_number(self, request):
        if not request.user.has_perm("accounting.view_journalentry"):
            return forbidden("You do not have permission to view journal entries.")
        return Response({"next_entry_number": next_entry_number()}, status=status.HTTP_200_OK)
