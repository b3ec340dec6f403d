"""Bulk order deletion: command and handler.

Deletion is permanent. Unknown ids are skipped, so the returned count is the
number of orders actually removed.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import String, Text
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class DeleteOrders:
    order_ids = Text(required=True)  # JSON: list of order ids
    deleted_by = String(max_length=255)


@ordering.command_handler(part_of=Order)
class DeleteOrdersHandler:
    @handle(DeleteOrders)
    def delete_orders(self, command):
        order_ids = json.loads(command.order_ids) if isinstance(command.order_ids, str) else command.order_ids
        repo = current_domain.repository_for(Order)

        deleted = 0
        for order_id in dict.fromkeys(str(order_id) for order_id in order_ids):
            try:
                order = repo.get(order_id)
            except ObjectNotFoundError:
                logger.warning("Order to delete not found", order_id=order_id)
                continue
            repo.remove(order)
            deleted += 1

        logger.info(
            "Orders deleted",
            requested=len(order_ids),
            deleted=deleted,
            deleted_by=command.deleted_by,
        )
        return deleted
