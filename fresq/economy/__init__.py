from fresq.economy.tickets import TicketService

__all__ = ["TicketService"]
