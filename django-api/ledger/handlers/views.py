"""HTTP handlers (views) - handle HTTP concerns only.

Handlers:
- Parse requests and validate input format
- Call services for business logic
- Map domain errors to HTTP responses
- Never contain business logic
- Never expose internal error details
"""

import logging

from rest_framework import status
from rest_framework.permissions import SAFE_METHODS, BasePermission, IsAdminUser
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.views import APIView

from ledger.domain import AggregateKind
from ledger.domain.errors import DomainError, ErrorCode
from ledger.handlers.serializers import (
    AggregateSerializer,
    BookingCreateSerializer,
    CapacitySerializer,
    CartUpdateSerializer,
    HolderCreateSerializer,
    HolderQuerySerializer,
    HolderSerializer,
    HolderUpdateSerializer,
    LineItemSerializer,
    OrderCreateSerializer,
    PageSerializer,
    PendingItemSerializer,
    PriceSerializer,
    StatusSerializer,
)
from ledger.services import AggregateService, CapacityService, CartService
from ledger.services.aggregate_service import line_item
from ledger.stores import DjangoLedgerStore

logger = logging.getLogger(__name__)

ERROR_STATUS = {
    ErrorCode.HOLDER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.AGGREGATE_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.PENDING_ITEM_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorCode.INSUFFICIENT_CAPACITY: status.HTTP_409_CONFLICT,
}


def capacity_service() -> CapacityService:
    store = DjangoLedgerStore()
    return CapacityService(store, store)


def aggregate_service() -> AggregateService:
    store = DjangoLedgerStore()
    return AggregateService(store, store, store)


def cart_service() -> CartService:
    store = DjangoLedgerStore()
    return CartService(store, store)


def owner_of(request: Request) -> str:
    return str(request.user.pk)


class IsAdminOrReadOnly(BasePermission):
    def has_permission(self, request, view) -> bool:
        return request.method in SAFE_METHODS or bool(
            request.user and request.user.is_staff
        )


class LedgerAPIView(APIView):
    """Base view translating domain errors into error responses."""

    def handle_exception(self, exc: Exception) -> Response:
        if isinstance(exc, DomainError):
            logger.debug("Request failed with %s", exc)
            return Response(
                {"code": exc.code.value, "message": exc.message},
                status=ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST),
            )
        return super().handle_exception(exc)


class HolderListView(LedgerAPIView):
    """Handler for GET/POST /api/holders"""

    permission_classes = [IsAdminOrReadOnly]

    def get(self, request: Request) -> Response:
        query = HolderQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        holders = capacity_service().list_holders(
            query.validated_data.get("kind"),
            search=query.validated_data.get("search"),
            page=query.validated_data["page"],
            size=query.validated_data["size"],
        )
        return Response(HolderSerializer(holders, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = HolderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holder = capacity_service().create_holder(**serializer.validated_data)
        return Response(HolderSerializer(holder).data, status=status.HTTP_201_CREATED)


class HolderDetailView(LedgerAPIView):
    """Handler for GET/PATCH/DELETE /api/holders/{holder_id}"""

    permission_classes = [IsAdminOrReadOnly]

    def get(self, request: Request, holder_id: str) -> Response:
        holder = capacity_service().get_holder(holder_id)
        return Response(HolderSerializer(holder).data)

    def patch(self, request: Request, holder_id: str) -> Response:
        serializer = HolderUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holder = capacity_service().update_holder(
            holder_id, serializer.validated_data["name"]
        )
        return Response(HolderSerializer(holder).data)

    def delete(self, request: Request, holder_id: str) -> Response:
        capacity_service().delete_holder(holder_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class HolderCapacityView(LedgerAPIView):
    """Handler for PUT /api/holders/{holder_id}/capacity"""

    permission_classes = [IsAdminUser]

    def put(self, request: Request, holder_id: str) -> Response:
        serializer = CapacitySerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holder = capacity_service().adjust_total_capacity(
            holder_id, serializer.validated_data["total_capacity"]
        )
        return Response(HolderSerializer(holder).data)


class HolderPriceView(LedgerAPIView):
    """Handler for PUT /api/holders/{holder_id}/price"""

    permission_classes = [IsAdminUser]

    def put(self, request: Request, holder_id: str) -> Response:
        serializer = PriceSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        holder = capacity_service().update_price(
            holder_id, serializer.validated_data["price"]
        )
        return Response(HolderSerializer(holder).data)


class CartView(LedgerAPIView):
    """Handler for GET/POST /api/cart"""

    def get(self, request: Request) -> Response:
        items = cart_service().get_cart(owner_of(request))
        return Response(PendingItemSerializer(items, many=True).data)

    def post(self, request: Request) -> Response:
        serializer = LineItemSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = cart_service().add_to_cart(
            owner_of(request),
            str(serializer.validated_data["holder_id"]),
            serializer.validated_data["quantity"],
        )
        return Response(PendingItemSerializer(item).data, status=status.HTTP_201_CREATED)


class CartItemView(LedgerAPIView):
    """Handler for PUT/DELETE /api/cart/{item_id}"""

    def put(self, request: Request, item_id: str) -> Response:
        serializer = CartUpdateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        item = cart_service().update_quantity(
            owner_of(request), item_id, serializer.validated_data["quantity"]
        )
        if item is None:
            return Response(status=status.HTTP_204_NO_CONTENT)
        return Response(PendingItemSerializer(item).data)

    def delete(self, request: Request, item_id: str) -> Response:
        cart_service().remove_from_cart(owner_of(request), item_id)
        return Response(status=status.HTTP_204_NO_CONTENT)


class AggregateListView(LedgerAPIView):
    """Shared listing for orders and bookings, newest first."""

    kind: AggregateKind

    def get(self, request: Request) -> Response:
        page = PageSerializer(data=request.query_params)
        page.is_valid(raise_exception=True)
        aggregates = aggregate_service().list_aggregates(
            owner_of(request),
            self.kind,
            page.validated_data["page"],
            page.validated_data["size"],
        )
        return Response(AggregateSerializer(aggregates, many=True).data)


class OrderListView(AggregateListView):
    """Handler for GET/POST /api/orders"""

    kind = AggregateKind.ORDER

    def post(self, request: Request) -> Response:
        serializer = OrderCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        service = aggregate_service()
        items = serializer.validated_data.get("items")
        if items is None:
            order = service.checkout(owner_of(request), AggregateKind.ORDER)
        else:
            order = service.create_aggregate(
                owner_of(request),
                AggregateKind.ORDER,
                [line_item(str(item["holder_id"]), item["quantity"]) for item in items],
            )
        return Response(AggregateSerializer(order).data, status=status.HTTP_201_CREATED)


class OrderDetailView(LedgerAPIView):
    """Handler for GET /api/orders/{order_id}"""

    def get(self, request: Request, order_id: str) -> Response:
        order = aggregate_service().get_aggregate(order_id, owner_of(request))
        return Response(AggregateSerializer(order).data)


class BookingListView(AggregateListView):
    """Handler for GET/POST /api/bookings"""

    kind = AggregateKind.BOOKING

    def post(self, request: Request) -> Response:
        serializer = BookingCreateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        booking = aggregate_service().book(
            owner_of(request),
            str(serializer.validated_data["holder_id"]),
            serializer.validated_data["seats"],
        )
        return Response(AggregateSerializer(booking).data, status=status.HTTP_201_CREATED)


class BookingDetailView(LedgerAPIView):
    """Handler for GET /api/bookings/{human_id}"""

    def get(self, request: Request, human_id: str) -> Response:
        booking = aggregate_service().get_aggregate_by_human_id(
            human_id, owner_of(request)
        )
        return Response(AggregateSerializer(booking).data)


class AggregateStatusView(LedgerAPIView):
    """Handler for PUT /api/aggregates/{aggregate_id}/status"""

    permission_classes = [IsAdminUser]

    def put(self, request: Request, aggregate_id: str) -> Response:
        serializer = StatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        aggregate = aggregate_service().update_status(
            aggregate_id, serializer.validated_data["status"]
        )
        return Response(AggregateSerializer(aggregate).data)


class AggregateCancelView(LedgerAPIView):
    """Handler for POST /api/aggregates/{aggregate_id}/cancel"""

    def post(self, request: Request, aggregate_id: str) -> Response:
        aggregate = aggregate_service().cancel_aggregate(aggregate_id, owner_of(request))
        return Response(AggregateSerializer(aggregate).data)
