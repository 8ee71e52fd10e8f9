"""Application layer: services, DTOs, interfaces and the dashboard use case.

Depends on domain only (plus cache key builders); infrastructure is
reached through the protocols in taskboard.application.interfaces.
"""
