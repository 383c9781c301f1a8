"""Adapters for the external collaborators: identity provider and document storage."""

from claim_tracker.gateways.identity import Identity, IdentityGateway, LocalIdentityGateway
from claim_tracker.gateways.storage import DocumentStorage, LocalDocumentStorage

__all__ = [
    "DocumentStorage",
    "Identity",
    "IdentityGateway",
    "LocalDocumentStorage",
    "LocalIdentityGateway",
]
