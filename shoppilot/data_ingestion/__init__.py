"""
Sample data loading.

Responsibilities:
- Read the bundled sample-shops CSV.
- Normalize rows into Shop records owned by the demo shop owner.
- Insert them, pre-approved, into the shop store.
"""
