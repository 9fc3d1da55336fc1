from fresq.services.code_registry import CodeGenerationError


class TicketError(Exception):
    pass


class TicketValidationError(TicketError):
    pass


class InvalidEmailError(TicketValidationError):
    pass


class PackNotFoundError(TicketValidationError):
    pass


class TicketNotFoundError(TicketError):
    pass


class TicketAlreadyPaidError(TicketError):
    pass


class TicketNotPendingError(TicketError):
    pass


class PackRefundNotAllowedError(TicketError):
    pass


class RefundBlockedError(TicketError):
    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


__all__ = [
    "CodeGenerationError",
    "InvalidEmailError",
    "PackNotFoundError",
    "PackRefundNotAllowedError",
    "RefundBlockedError",
    "TicketAlreadyPaidError",
    "TicketError",
    "TicketNotFoundError",
    "TicketNotPendingError",
    "TicketValidationError",
]
