"""
Natural-language shop recommendations.

Responsibilities:
- Match a free-text query against shop categories (substring + synonym rules).
- Fetch nearby approved candidates and keep the ones that match.
- Ask the LLM to rank them, degrading to local results when it cannot.
- Return at most three de-duplicated recommendations with reasons.
"""
