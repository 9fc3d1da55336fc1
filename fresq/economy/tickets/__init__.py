from fresq.economy.tickets.service import TicketService

__all__ = ["TicketService"]
