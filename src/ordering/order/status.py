"""Staff status updates: command and handler.

Status changes are single authoritative writes with last-write-wins
semantics; there is no version check between concurrent staff sessions.
"""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order, parse_status


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(required=True, max_length=50)
    changed_by = String(max_length=255)


@ordering.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        target = parse_status(command.status)

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.set_status(target, changed_by=command.changed_by)
        repo.add(order)

        return order.status
