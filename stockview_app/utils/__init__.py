"""
Utility functions module.

Date-range resolution and epoch conversion shared by the portfolio index
calculator and the price providers.

Time Semantics:
- Price point timestamps are integer epoch seconds, UTC-aligned
- Calendar dates (purchase dates, window bounds) map to 00:00 UTC
- "Today" is injectable everywhere so calculations stay deterministic
"""
