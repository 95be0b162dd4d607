"""Standard exceptions for the gapfill package."""


class GapFillError(Exception):
    """Base class for gapfill specific errors."""


class ConfigurationError(GapFillError):
    """Exception raised for errors in the configuration."""


class InvalidChangeColumnsError(ConfigurationError):
    """Raised when the change-column count cannot be applied to a dataset."""

    def __init__(
        self,
        change_columns: int,
        row_length: int | None = None,
        message: str | None = None,
    ) -> None:
        """Initialize InvalidChangeColumnsError.

        Args:
            change_columns: The offending change-columns-per-row value
            row_length: Length of the value sequence it was applied to, if known
            message: Optional custom error message
        """
        self.change_columns = change_columns
        self.row_length = row_length
        if message is None:
            if change_columns <= 0:
                message = f"change_columns_per_row must be positive, got {change_columns}."
            else:
                message = (
                    f"change_columns_per_row={change_columns} needs {change_columns * 2} "
                    f"value columns but rows only hold {row_length}."
                )
        super().__init__(message)


class ConfigurationLoadingError(ConfigurationError):
    """Raised when a configuration section cannot be turned into settings."""

    def __init__(self, section: str, details: str | None = None) -> None:
        """Initialize ConfigurationLoadingError.

        Args:
            section: The configuration section that failed to load
            details: Optional detailed error information
        """
        self.section = section
        self.details = details
        message = f"Failed to load configuration section '{section}'."
        if details:
            message += f" Details: {details}"
        super().__init__(message)


class DatasetStructureError(GapFillError):
    """Base class for structural problems in a record sequence."""


class InconsistentRowLengthError(DatasetStructureError):
    """Raised when channels in one dataset carry different value-sequence lengths."""

    def __init__(self, channel: str, expected: int, actual: int, timestamp: object) -> None:
        """Initialize InconsistentRowLengthError.

        Args:
            channel: Name of the channel with the unexpected length
            expected: Length shared by the rest of the dataset
            actual: Length found on this channel
            timestamp: Timestamp of the record holding the channel
        """
        self.channel = channel
        self.expected = expected
        self.actual = actual
        self.timestamp = timestamp
        super().__init__(
            f"Channel '{channel}' at {timestamp} has {actual} values, "
            f"expected {expected} like the rest of the dataset.",
        )


class DuplicateChannelError(DatasetStructureError):
    """Raised when a record holds two channels with the same name."""

    def __init__(self, channel: str, timestamp: object) -> None:
        """Initialize DuplicateChannelError.

        Args:
            channel: The duplicated channel name
            timestamp: Timestamp of the record holding the duplicates
        """
        self.channel = channel
        self.timestamp = timestamp
        super().__init__(f"Channel '{channel}' appears more than once at {timestamp}.")


class AbsentValueError(GapFillError, ValueError):
    """Raised when the value of an absent cell is requested."""
