"""
Data access layer.

Design rules:
- Views call ONLY functions in this package (service.py, stats.py, uploads.py).
- Mock mode and live mode share one `Backend` interface (memory.py / connection.py).
- No env var reads here (config-only).
"""
