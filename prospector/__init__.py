"""
Prospector: imports OpenStreetMap business exports as sales prospects.

Phases:
- Parse a semicolon-delimited export into prospect candidates for one city.
- Drop chains, franchises, banks and public services with an LLM filter.
- Persist the remaining prospects in atomic batches.
"""
