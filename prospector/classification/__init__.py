"""
Junk-lead classification layer.

Responsibilities:
- Manage Groq API configuration and credentials.
- Ask the LLM which business names are chains, franchises, banks or public services.
- Degrade to "nothing excluded" for any chunk the LLM fails to classify.
"""
