"""Adapters for the Supabase storage and identity services."""

from sitter_gateway.db.client import DatabaseClient, create_anon_client, create_service_client
from sitter_gateway.db.identity import IdentityAdmin

__all__ = [
    "DatabaseClient",
    "IdentityAdmin",
    "create_anon_client",
    "create_service_client",
]
