"""
Prospect records.

Responsibilities:
- Define the prospect schema, statuses and API payloads.
- Query, update and delete stored prospects outside of the import pipeline.
"""
