"""Exceptions raised by the insights engine."""


class InsightsError(Exception):
    """Base exception for the insights engine"""

    pass


class SnapshotLoadError(InsightsError):
    """The records for a report could not be read from the store"""

    pass


class InvalidRecordError(InsightsError):
    """A single raw record is malformed and cannot join the snapshot"""

    pass
