"""
Shop listings.

Responsibilities:
- Define the Shop record, its GeoJSON location and weekly opening hours.
- Hold shops in a store that answers proximity queries.
- Search approved shops around a point with category / free-text filters.
- Evaluate whether a shop is open right now.
"""
