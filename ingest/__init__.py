"""
Ingest package: Favro REST client.
"""
