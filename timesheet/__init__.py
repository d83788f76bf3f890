"""
Timesheet package: extract today's logged time from cards and aggregate it into a report.
"""

from .aggregate import TimesheetAggregator, format_duration
from .extract import extract_todays_reports

__all__ = ["TimesheetAggregator", "format_duration", "extract_todays_reports"]
