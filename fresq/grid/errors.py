class GridError(Exception):
    pass


class GridConfigMissingError(GridError):
    """The singleton grid configuration row has not been seeded."""


class TierNotFoundError(GridError):
    """No tier matches the requested ticket count or grid dimensions."""
