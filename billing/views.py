"""
Billing dashboard and fee configuration endpoints.

``?search=`` matches the payer email and ``?month=YYYY-MM`` the payment
month.  ``summary`` adds the filtered total and the month-by-month
revenue of every visible record.
"""
from rest_framework import mixins, permissions, viewsets
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import APIView

from common.permissions import IsAdminRole

from .fees import FeeConfigError, get_fee_config, update_fee_config
from .serializers import BillingRecordSerializer, FeeConfigSerializer, MonthlyRevenueSerializer
from .services import filter_records, revenue_by_month, total_revenue, visible_records


class BillingRecordViewSet(mixins.ListModelMixin, mixins.RetrieveModelMixin, viewsets.GenericViewSet):
    serializer_class = BillingRecordSerializer
    permission_classes = [permissions.IsAuthenticated]
    filter_backends = []

    def get_queryset(self):
        return visible_records(self.request.user)

    def _filtered(self):
        params = self.request.query_params
        return filter_records(list(self.get_queryset()), params.get("search", ""), params.get("month", ""))

    def list(self, request, *args, **kwargs):
        records = self._filtered()
        page = self.paginate_queryset(records)
        if page is not None:
            return self.get_paginated_response(self.get_serializer(page, many=True).data)
        return Response(self.get_serializer(records, many=True).data)

    @action(detail=False, methods=["get"])
    def summary(self, request):
        records = list(self.get_queryset())
        params = request.query_params
        filtered = filter_records(records, params.get("search", ""), params.get("month", ""))
        return Response({
            "count": len(filtered),
            "total_revenue": str(total_revenue(filtered)),
            "revenue_by_month": MonthlyRevenueSerializer(revenue_by_month(records), many=True).data,
        })


class FeeConfigView(APIView):
    """GET the fee settings; PUT/PATCH a subset of keys to upsert them."""
    permission_classes = [IsAdminRole]

    def get(self, request):
        return Response(FeeConfigSerializer(get_fee_config()).data)

    def put(self, request):
        try:
            data = request.data.dict() if hasattr(request.data, "dict") else dict(request.data)
            config = update_fee_config(data)
        except FeeConfigError as e:
            raise ValidationError({"detail": str(e)})
        return Response(FeeConfigSerializer(config).data)

    patch = put
