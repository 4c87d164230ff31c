import logging
import os
import uuid

from django.db.models import Q
from rest_framework import status
from rest_framework.parsers import FormParser, MultiPartParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from core.context import get_team_context
from core.generics import api_error, user_can_manage_record
from core.supabase_client import get_signed_url, upload_receipt
from events.datetime_utils import today
from .models import Budget, FinanceRecord
from .serializers import BudgetSerializer, FinanceRecordSerializer
from .summary import (
    DEFAULT_RANGE,
    budget_spent,
    category_breakdown,
    monthly_series,
    range_start,
    totals,
)

logger = logging.getLogger("pitcrew.finances")

RECEIPT_MAX_BYTES = 10 * 1024 * 1024
RECEIPT_CONTENT_TYPES = {
    "application/pdf": ".pdf",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
}


def filtered_records(ctx, params):
    """
    Team records narrowed by ?type=, ?category= and ?range=.
    Raises ValueError on an unknown range.
    """
    qs = FinanceRecord.objects.filter(team=ctx.team).select_related("created_by")

    record_type = params.get("type")
    if record_type and record_type != "all":
        qs = qs.filter(type=record_type)

    category = params.get("category")
    if category and category != "all":
        qs = qs.filter(
            Q(category=category) |
            Q(expense_category=category) |
            Q(income_source=category)
        )

    start = range_start(params.get("range", DEFAULT_RANGE), today())
    if start is not None:
        qs = qs.filter(date__gte=start)

    return qs.order_by("-date", "-id")


class FinanceRecordListCreateView(APIView):
    """
    GET  /api/finances/records/?type=&category=&range=
    POST /api/finances/records/
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        try:
            qs = filtered_records(ctx, request.query_params)
        except ValueError as e:
            return api_error(str(e))
        return Response(FinanceRecordSerializer(qs, many=True).data)

    def post(self, request):
        ctx = get_team_context(request)
        serializer = FinanceRecordSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = serializer.save(team=ctx.team, created_by=ctx.user)
        logger.info(f"Finance record {record.id} ({record.type} {record.amount}) added to team {ctx.team_id}")
        return Response(FinanceRecordSerializer(record).data, status=status.HTTP_201_CREATED)


class FinanceRecordDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, ctx, pk):
        try:
            return FinanceRecord.objects.get(pk=pk, team=ctx.team)
        except FinanceRecord.DoesNotExist:
            return None

    def get(self, request, pk):
        ctx = get_team_context(request)
        record = self.get_object(ctx, pk)
        if record is None:
            return api_error("Record not found", status.HTTP_404_NOT_FOUND)
        return Response(FinanceRecordSerializer(record).data)

    def patch(self, request, pk):
        ctx = get_team_context(request)
        record = self.get_object(ctx, pk)
        if record is None:
            return api_error("Record not found", status.HTTP_404_NOT_FOUND)
        if not user_can_manage_record(ctx, record):
            return api_error("You do not have permission to edit this record.", status.HTTP_403_FORBIDDEN)

        serializer = FinanceRecordSerializer(record, data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        serializer.save()
        return Response(serializer.data)

    def delete(self, request, pk):
        ctx = get_team_context(request)
        record = self.get_object(ctx, pk)
        if record is None:
            return api_error("Record not found", status.HTTP_404_NOT_FOUND)
        if not user_can_manage_record(ctx, record):
            return api_error("You do not have permission to delete this record.", status.HTTP_403_FORBIDDEN)

        record.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class FinanceSummaryView(APIView):
    """
    GET /api/finances/summary/?type=&category=&range=
    Totals, the monthly income/expense series and the category breakdown
    over the same filtered records the list shows.
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        try:
            records = list(filtered_records(ctx, request.query_params))
        except ValueError as e:
            return api_error(str(e))

        return Response({
            "range": request.query_params.get("range", DEFAULT_RANGE),
            "summary": totals(records),
            "monthly": monthly_series(records),
            "categories": category_breakdown(records),
        })


class BudgetListCreateView(APIView):
    """
    GET  /api/finances/budgets/
    POST /api/finances/budgets/   (team admin)
    """
    permission_classes = [IsAuthenticated]

    def get(self, request):
        ctx = get_team_context(request)
        budgets = list(Budget.objects.filter(team=ctx.team))
        current = today()
        spent = {budget.id: budget_spent(budget, current) for budget in budgets}
        return Response(BudgetSerializer(budgets, many=True, context={"spent": spent}).data)

    def post(self, request):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can set budgets.", status.HTTP_403_FORBIDDEN)

        serializer = BudgetSerializer(data=request.data, context={"team": ctx.team})
        serializer.is_valid(raise_exception=True)
        budget = serializer.save(team=ctx.team, created_by=ctx.user)
        spent = {budget.id: budget_spent(budget, today())}
        return Response(BudgetSerializer(budget, context={"spent": spent}).data, status=status.HTTP_201_CREATED)


class BudgetDetailView(APIView):
    permission_classes = [IsAuthenticated]

    def get_object(self, ctx, pk):
        try:
            return Budget.objects.get(pk=pk, team=ctx.team)
        except Budget.DoesNotExist:
            return None

    def patch(self, request, pk):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can edit budgets.", status.HTTP_403_FORBIDDEN)
        budget = self.get_object(ctx, pk)
        if budget is None:
            return api_error("Budget not found", status.HTTP_404_NOT_FOUND)

        serializer = BudgetSerializer(budget, data=request.data, partial=True, context={"team": ctx.team})
        serializer.is_valid(raise_exception=True)
        budget = serializer.save()
        spent = {budget.id: budget_spent(budget, today())}
        return Response(BudgetSerializer(budget, context={"spent": spent}).data)

    def delete(self, request, pk):
        ctx = get_team_context(request)
        if not ctx.is_admin:
            return api_error("Only team admins can delete budgets.", status.HTTP_403_FORBIDDEN)
        budget = self.get_object(ctx, pk)
        if budget is None:
            return api_error("Budget not found", status.HTTP_404_NOT_FOUND)

        budget.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


class ReceiptUploadView(APIView):
    """
    POST /api/finances/receipts/   multipart: file, record_id?

    Stores the file in the receipts bucket and returns a signed URL.
    When record_id is given, the record's receipt_url points at the file.
    """
    permission_classes = [IsAuthenticated]
    parser_classes = [MultiPartParser, FormParser]

    def post(self, request):
        ctx = get_team_context(request)
        upload = request.FILES.get("file")
        if upload is None:
            return api_error("No file uploaded.")

        extension = RECEIPT_CONTENT_TYPES.get(upload.content_type)
        if extension is None:
            return api_error("Receipts must be PDF, JPEG, PNG or WebP files.")
        if upload.size > RECEIPT_MAX_BYTES:
            return api_error("Receipt is larger than 10 MB.")

        record = None
        record_id = request.data.get("record_id")
        if record_id:
            record = FinanceRecord.objects.filter(pk=record_id, team=ctx.team).first()
            if record is None:
                return api_error("Record not found", status.HTTP_404_NOT_FOUND)
            if not user_can_manage_record(ctx, record):
                return api_error("You do not have permission to edit this record.", status.HTTP_403_FORBIDDEN)

        base, _ = os.path.splitext(os.path.basename(upload.name))
        filename = f"{base[:40] or 'receipt'}_{uuid.uuid4().hex[:8]}{extension}"

        path = upload_receipt(ctx.team_id, filename, upload.read(), upload.content_type)
        if path is None:
            return api_error("Receipt storage is unavailable.", status.HTTP_503_SERVICE_UNAVAILABLE)

        if record is not None:
            record.receipt_url = path
            record.save(update_fields=["receipt_url", "updated_at"])

        return Response(
            {"path": path, "signed_url": get_signed_url(path), "record_id": record.id if record else None},
            status=status.HTTP_201_CREATED,
        )
