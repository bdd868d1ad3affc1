from clientdb.schemas.client import (
    ClientCreate, ClientUpdate, ClientResponse, ClientListResponse,
    MessageResponse, HealthResponse, MUTABLE_FIELDS, REQUIRED_FIELDS
)

__all__ = [
    # Client
    "ClientCreate", "ClientUpdate", "ClientResponse", "ClientListResponse",
    "MUTABLE_FIELDS", "REQUIRED_FIELDS",
    # Misc
    "MessageResponse", "HealthResponse",
]
