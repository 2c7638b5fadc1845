"""
Utility functions module.

Time Semantics:
- History timestamps are stored as integer milliseconds since the Unix epoch
- All datetimes handed out by this package are timezone-aware UTC
"""
