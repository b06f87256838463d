"""
Import pipeline.

Sequences parsing, junk-lead classification, exclusion and batched
persistence for one city, and reports a typed outcome.
"""
