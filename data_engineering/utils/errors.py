"""
Pipeline Errors

Every failure in the pipeline aborts the current run. Errors carry enough
context (source, column, row index) to diagnose the input that caused them.

Usage:
    from data_engineering.utils.errors import SchemaMismatch

    raise SchemaMismatch(['Province/State'], source='covid.csv')
"""

from typing import Iterable, Optional


class PipelineError(Exception):
    """Base class for all errors raised by the pipeline"""


class ConfigError(PipelineError):
    """Pipeline configuration is missing a field or has an invalid value"""


class SourceUnavailable(PipelineError):
    """Input table could not be fetched or read"""

    def __init__(self, source, reason: str):
        self.source = str(source)
        self.reason = reason
        super().__init__(f'Source unavailable: {self.source} ({reason})')


class SchemaMismatch(PipelineError):
    """Table is missing expected columns or fails schema checks"""

    def __init__(
        self,
        missing_columns: Iterable[str] = (),
        source: Optional[str] = None,
        detail: Optional[str] = None
    ):
        self.missing_columns = list(missing_columns)
        self.source = source
        self.detail = detail

        message = 'Schema mismatch'
        if source:
            message += f' in {source}'
        if self.missing_columns:
            message += f': missing columns {self.missing_columns}'
        if detail:
            message += f' ({detail})'
        super().__init__(message)


class DateParseError(PipelineError):
    """A date string did not match the configured format"""

    def __init__(self, column: str, value, date_format: str, row_index=None):
        self.column = column
        self.value = value
        self.date_format = date_format
        self.row_index = row_index

        where = f'column {column!r}'
        if row_index is not None:
            where += f', row {row_index}'
        super().__init__(
            f'Cannot parse date {value!r} with format {date_format!r} ({where})'
        )
