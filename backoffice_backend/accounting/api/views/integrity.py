# accounting/api/views/integrity.py

"""
GET /api/accounting/integrity/orphans/

Report-only: committed documents without a live journal entry, plus
entries whose postings do not balance. Repairs go through the
delete_orphans management command.
"""

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounting.api.errors import forbidden
from accounting.services.integrity_service import find_orphans, find_unbalanced_entries


@extend_schema(tags=["accounting"], responses={200: dict})
class OrphanReportView(APIView):
    permission_classes = [IsAuthenticated]

    def get(self, request):
        if not request.user.has_perm("accounting.view_journalentry"):
            return forbidden("You do not have permission to view the integrity report.")

        orphans = find_orphans()
        unbalanced = find_unbalanced_entries()
        return Response(
            {
                "orphans": orphans,
                "orphan_count": sum(len(rows) for rows in orphans.values()),
                "unbalanced_entries": unbalanced,
            },
            status=status.HTTP_200_OK,
        )
