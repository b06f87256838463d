"""
Prospect ingestion package.

Responsibilities:
- Resolve which export columns hold each prospect field.
- Normalize raw semicolon-delimited rows into prospect candidates.
- Translate OpenStreetMap activity codes into display labels.
"""
