from clientdb.models.client import Client

__all__ = [
    "Client",
]
