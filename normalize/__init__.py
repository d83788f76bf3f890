"""
Normalize package: Favro payloads as read-only entities.
"""
