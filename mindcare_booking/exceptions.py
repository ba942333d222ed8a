class BookingError(ValueError):
    """Base class for rejected booking and wizard actions."""


class IncompleteBookingError(BookingError):
    pass


class ProviderNotFoundError(BookingError):
    pass


class SessionNotFoundError(BookingError):
    pass


class DateOutOfRangeError(BookingError):
    pass


class SlotUnavailableError(BookingError):
    pass


class StepNotReachableError(BookingError):
    pass


class InvalidDateError(BookingError):
    pass
