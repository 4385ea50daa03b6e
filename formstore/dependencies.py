"""
Dependency wiring for the submission store.
"""

from __future__ import annotations

from formstore.config import get_settings
from formstore.connection import InMemoryRemoteStore, RemoteStore, SupabaseConnection
from formstore.gateway import SubmissionGateway

_connection: RemoteStore | None = None
_gateway: SubmissionGateway | None = None


def get_connection() -> RemoteStore:
    """
    Return the process-wide connection, building it on first use.

    Raises ConfigurationMissing when the Supabase endpoint or key is unset;
    there is no fallback to a half-configured client.
    """
    global _connection
    if _connection:
        return _connection

    settings = get_settings()
    if settings.use_in_memory_backends:
        _connection = InMemoryRemoteStore()
    else:
        _connection = SupabaseConnection.from_settings(settings)
    return _connection


def get_gateway() -> SubmissionGateway:
    global _gateway
    if _gateway:
        return _gateway

    settings = get_settings()
    _gateway = SubmissionGateway(get_connection(), export_dir=settings.export_dir)
    return _gateway
