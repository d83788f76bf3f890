"""
Storage package: SQLite tables for identity links and posted reports.
"""
