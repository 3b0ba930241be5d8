"""Application service: Create Order use case.

Orchestrates the Cart Snapshot Resolver, the Inventory Ledger and the Order
aggregate.  Everything that must be atomic (validation, reservations, order
and item rows) happens inside a single unit of work; cart clearing and
notifications run only after it has committed.
"""

from __future__ import annotations

import structlog

from dsv.application.dto import CreateOrderRequest, OrderDTO, order_to_dto
from dsv.application.notifications import NotificationBatch, Notifier
from dsv.application.unit_of_work import PersistenceError, UnitOfWork, UnitOfWorkFactory
from dsv.domain.exceptions import InsufficientStock, ProductNotFound, ProductUnavailable
from dsv.domain.model.cart import CartSnapshot, CartSource
from dsv.domain.model.order import Order, OrderItem, validate_customer_details
from dsv.domain.model.value_objects import Money
from dsv.domain.service.cart_snapshot_resolver import CartSnapshotResolver
from dsv.domain.service.inventory_ledger import (
    DEFAULT_LOW_STOCK_THRESHOLD,
    InventoryLedger,
)
from dsv.domain.service.order_number import OrderNumberGenerator

logger = structlog.get_logger(__name__)


class CreateOrderHandler:

    def __init__(
        self,
        uow_factory: UnitOfWorkFactory,
        notifier: Notifier,
        order_numbers: OrderNumberGenerator | None = None,
        low_stock_threshold: int = DEFAULT_LOW_STOCK_THRESHOLD,
        recompute_client_totals: bool = False,
    ) -> None:
        self._uow_factory = uow_factory
        self._notifier = notifier
        self._order_numbers = order_numbers or OrderNumberGenerator()
        self._low_stock_threshold = low_stock_threshold
        self._recompute_client_totals = recompute_client_totals

    def handle(self, request: CreateOrderRequest) -> OrderDTO:
        """Turn a cart into a persisted order.

        Steps:
        1. Validate payment method and customer/shipping details.
        2. Resolve the purchase lines (client cart wins over persisted cart)
           and, for a persisted cart, check availability of every line.
        3. Compute totals.
        4. Reserve stock for every line and persist order + items, all in
           one transaction.
        5. After commit: clear the persisted cart, send notifications.
        """
        validate_customer_details(
            request.payment_method,
            request.user_id,
            request.customer_name,
            request.customer_phone,
            request.customer_email,
            request.shipping_address,
        )

        with self._uow_factory() as uow:
            resolver = CartSnapshotResolver(uow.carts, uow.products)
            snapshot = resolver.resolve(request.user_id, request.items)

            if snapshot.source == CartSource.PERSISTED:
                self._validate_availability(uow, snapshot)
                subtotal = None
            else:
                subtotal = self._client_subtotal(request, snapshot)

            order = Order.create(
                order_number=self._order_numbers.generate(),
                user_id=request.user_id,
                items=[self._to_item(line) for line in snapshot.lines],
                payment_method=request.payment_method,
                shipping_fee=self._shipping_fee(request),
                subtotal=subtotal,
                customer_name=request.customer_name,
                customer_phone=request.customer_phone,
                customer_email=request.customer_email,
                shipping_address=request.shipping_address,
                notes=request.notes,
            )

            ledger = InventoryLedger(uow.products, self._low_stock_threshold)
            ledger.reserve_all(self._quantities(snapshot))
            uow.orders.add(order)
            uow.commit()
            alerts = ledger.drain_alerts()

        dto = order_to_dto(order)
        logger.info(
            "order_created",
            order_id=dto.id,
            order_number=dto.order_number,
            user_id=dto.user_id,
            cart_source=snapshot.source.value,
            status=dto.status,
            total=str(dto.total),
        )

        if request.user_id is not None:
            self._clear_cart(request.user_id)

        notifications = NotificationBatch(self._notifier)
        notifications.order_confirmation(dto)
        notifications.stock_alerts(alerts)
        notifications.flush()
        return dto

    # --- Internal helpers -----------------------------------------------------

    @staticmethod
    def _quantities(snapshot: CartSnapshot) -> dict[int, int]:
        quantities: dict[int, int] = {}
        for line in snapshot.lines:
            quantities[line.product_id] = (
                quantities.get(line.product_id, 0) + line.quantity.value
            )
        return quantities

    def _validate_availability(self, uow: UnitOfWork, snapshot: CartSnapshot) -> None:
        """Reject a persisted cart before any write if a line cannot ship."""
        for product_id, requested in self._quantities(snapshot).items():
            product = uow.products.get_by_id(product_id)
            if product is None:
                raise ProductNotFound(product_id)
            if not product.active:
                raise ProductUnavailable(product.id, product.name)
            if product.stock_quantity < requested:
                raise InsufficientStock(
                    product.id,
                    product.name,
                    available=product.stock_quantity,
                    requested=requested,
                )

    def _client_subtotal(
        self, request: CreateOrderRequest, snapshot: CartSnapshot
    ) -> Money:
        """Subtotal for a client cart.

        The submitted figure is trusted as-is unless recomputation is
        switched on; disagreements with the line prices are logged.
        """
        computed = snapshot.subtotal
        if self._recompute_client_totals or request.subtotal is None:
            return computed

        submitted = Money.of(request.subtotal)
        if submitted != computed:
            logger.warning(
                "client_subtotal_mismatch",
                user_id=request.user_id,
                submitted=str(submitted.amount),
                computed=str(computed.amount),
            )
        return submitted

    @staticmethod
    def _shipping_fee(request: CreateOrderRequest) -> Money:
        if request.shipping_fee is None:
            return Money.zero()
        return Money.of(request.shipping_fee)

    @staticmethod
    def _to_item(line) -> OrderItem:
        return OrderItem(
            product_id=line.product_id,
            product_name=line.product_name,
            quantity=line.quantity,
            unit_price=line.unit_price,  # <-- price snapshot
            product_description=line.product_description,
            category_name=line.category_name,
            product_image_url=line.product_image_url,
        )

    def _clear_cart(self, user_id: int) -> None:
        """Best-effort: the order already exists whatever happens here."""
        try:
            with self._uow_factory() as uow:
                uow.carts.clear(user_id)
                uow.commit()
        except PersistenceError:
            logger.exception("cart_clear_failed", user_id=user_id)
