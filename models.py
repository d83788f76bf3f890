"""
Report rows and the report body handed to the renderer.
"""
from typing import List, Optional

REPORT_HEADER = "Today's update"


class ReportLine:
    """
    One rendered row. kind is 'entry' for a logged-time record, 'not_found' when the token
    could not be resolved and 'empty' when the card has nothing logged today.
    """

    def __init__(self, key: str, duration: str, description: str, kind: str = 'entry'):
        self.key = key
        self.duration = duration
        self.description = description
        self.kind = kind

    def to_dict(self):
        return {'key': self.key, 'duration': self.duration, 'description': self.description, 'kind': self.kind}

    def __eq__(self, other):
        return isinstance(other, ReportLine) and other.to_dict() == self.to_dict()

    def __repr__(self):
        return f"ReportLine({self.key!r}, {self.duration!r}, {self.description!r}, kind={self.kind!r})"


class ReportBody:
    def __init__(self, lines: Optional[List[ReportLine]] = None, header: str = REPORT_HEADER):
        self.header = header
        self.lines = lines or []

    def __str__(self):
        from report.renderer import render_text

        return render_text(self)
