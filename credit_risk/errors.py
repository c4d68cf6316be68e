"""Exceptions raised by the credit sweep pipeline."""


class CreditRiskError(ValueError):
    """Base class for input/data problems detected by the pipeline."""


class FeatureBuildError(CreditRiskError):
    """A column could not be turned into a numeric feature."""

    def __init__(self, column: str, reason: str):
        self.column = column
        super().__init__(f"Column {column!r}: {reason}")


class PartitionError(CreditRiskError):
    """A stratified split or fold assignment would be degenerate."""


class DevianceError(CreditRiskError):
    """A probability is invalid for the label it is scored against."""

    def __init__(self, row: int, reason: str):
        self.row = row
        super().__init__(f"Row {row}: {reason}")
