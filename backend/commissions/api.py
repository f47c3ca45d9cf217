from rest_framework import generics, permissions, status
from rest_framework.response import Response
from rest_framework.views import APIView

from core.results import Failure, failure_response

from .models import Commission
from .serializers import CommissionSerializer
from .services import CommissionService, agent_summary, parse_commission_request


class CommissionListCreateView(generics.ListAPIView):
    """Commissions where the caller is the agent; POST records a new sale."""

    serializer_class = CommissionSerializer
    permission_classes = [permissions.IsAuthenticated]
    filterset_fields = ["status"]

    def get_queryset(self):
        return Commission.objects.for_agent(self.request.user).select_related("property")

    def post(self, request, *args, **kwargs):
        parsed = parse_commission_request(request.data, request.headers.get("Idempotency-Key"))
        if isinstance(parsed, Failure):
            return failure_response(parsed)
        result = CommissionService().create(parsed.value, created_by=request.user)
        if isinstance(result, Failure):
            return failure_response(result)
        created = result.value
        return Response(
            CommissionSerializer(created.commission).data,
            status=status.HTTP_201_CREATED if created.created else status.HTTP_200_OK,
        )


class CommissionSummaryView(APIView):
    permission_classes = [permissions.IsAuthenticated]

    def get(self, request, *args, **kwargs):
        return Response(agent_summary(request.user))
