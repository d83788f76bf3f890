"""
Report package: render a ReportBody as chat text or an export format.
"""
