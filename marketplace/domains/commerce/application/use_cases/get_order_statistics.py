"""
Get Order Statistics Use Case

Order counts per status and completed revenue for a seller's shops.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from decimal import Decimal

from marketplace.domains.commerce.application.ports import IUnitOfWork
from marketplace.domains.commerce.application.use_cases.order_access import seller_shop_ids
from marketplace.domains.commerce.domain.value_objects import OrderStatus


@dataclass
class OrderStatisticsResponse:
    total_orders: int = 0
    status_counts: dict[str, int] = field(default_factory=dict)
    total_revenue: Decimal = Decimal("0")


class GetOrderStatisticsUseCase:
    """Revenue counts only COMPLETED orders."""

    def __init__(self, uow_factory: Callable[[], IUnitOfWork]):
        self.uow_factory = uow_factory

    async def execute(self, seller_id: str) -> OrderStatisticsResponse:
        async with self.uow_factory() as uow:
            shop_ids = await seller_shop_ids(uow, seller_id)
            counts = await uow.orders.count_by_status(shop_ids)
            revenue = await uow.orders.sum_total(shop_ids, OrderStatus.COMPLETED)

        status_counts = {status.value: counts.get(status, 0) for status in OrderStatus}
        return OrderStatisticsResponse(
            total_orders=sum(status_counts.values()),
            status_counts=status_counts,
            total_revenue=revenue,
        )


__all__ = ["OrderStatisticsResponse", "GetOrderStatisticsUseCase"]
