"""
Status values and allowed transitions for purchase orders and invoices.
Values are stored lowercase in Spanish, as the frontend displays them.
"""
from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    PENDING = "pendiente"
    SENT = "enviada"
    CANCELLED = "cancelada"


class InvoiceStatus(str, Enum):
    PENDING = "pendiente"
    SENT = "enviada"
    PAID = "pagada"


ORDER_INITIAL_STATUS = OrderStatus.PENDING
INVOICE_INITIAL_STATUS = InvoiceStatus.PENDING

ORDER_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({OrderStatus.SENT, OrderStatus.CANCELLED}),
    OrderStatus.SENT: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}

INVOICE_TRANSITIONS: Dict[InvoiceStatus, FrozenSet[InvoiceStatus]] = {
    InvoiceStatus.PENDING: frozenset({InvoiceStatus.SENT, InvoiceStatus.PAID}),
    InvoiceStatus.SENT: frozenset({InvoiceStatus.PAID}),
    InvoiceStatus.PAID: frozenset(),
}

# Orders can only be invoiced once sent to the supplier
INVOICEABLE_ORDER_STATUSES = frozenset({OrderStatus.SENT})


def can_transition(transitions: Dict, current: Enum, target: Enum) -> bool:
    """
    True when `target` is reachable from `current` in a single step.
    Unknown current statuses have no outgoing edges.
    """
    return target in transitions.get(current, frozenset())
