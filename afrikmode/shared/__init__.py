"""Shared: cross-cutting enums and telemetry helpers."""
