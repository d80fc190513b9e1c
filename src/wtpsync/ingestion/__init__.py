"""Ingestion layer.

Turns raw telemetry payloads into canonical partial plant state. Only
the state store is allowed to merge the result.
"""

__all__: list[str] = []
