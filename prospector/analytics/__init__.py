"""
Import analytics.

Keeps an in-memory log of import outcomes and aggregates it for the admin
dashboard.
"""
