"""Exceptions raised by the lineage core."""


class LineageError(Exception):
    """Base class for lineage errors."""


class NotFoundError(LineageError):
    """A referenced person or record is not in the snapshot."""


class FounderNotFoundError(NotFoundError):
    def __init__(self, missing_ids: list[str]):
        self.missing_ids = missing_ids
        super().__init__(f"Founder(s) not found: {', '.join(missing_ids)}")
