from __future__ import annotations

from .builder import _as_create_result, _build_ticket
from .confirm import confirm_pack_purchase, confirm_ticket_payment
from .init import create_pack_purchase, create_ticket
from .queries import (
    get_ticket_by_order_id,
    get_ticket_stats,
    list_pack_catalog,
    list_recent_tickets,
    list_user_tickets,
)
from .refund import cancel_ticket
from .utilities import _build_order_id, _require_email


class TicketService:
    _build_order_id = staticmethod(_build_order_id)
    _require_email = staticmethod(_require_email)
    _build_ticket = staticmethod(_build_ticket)
    _as_create_result = staticmethod(_as_create_result)
    create_ticket = staticmethod(create_ticket)
    create_pack_purchase = staticmethod(create_pack_purchase)
    confirm_ticket_payment = staticmethod(confirm_ticket_payment)
    confirm_pack_purchase = staticmethod(confirm_pack_purchase)
    cancel_ticket = staticmethod(cancel_ticket)
    get_ticket_by_order_id = staticmethod(get_ticket_by_order_id)
    list_user_tickets = staticmethod(list_user_tickets)
    list_recent_tickets = staticmethod(list_recent_tickets)
    get_ticket_stats = staticmethod(get_ticket_stats)
    list_pack_catalog = staticmethod(list_pack_catalog)


__all__ = ["TicketService"]
