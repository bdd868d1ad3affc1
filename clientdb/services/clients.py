# clientdb/services/clients.py
"""
Client storage operations.

All reads and writes of the clients table go through ClientService. The
service works on a caller-owned Session and commits its own writes.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from clientdb.models.client import Client, utcnow
from clientdb.schemas.client import MUTABLE_FIELDS

logger = logging.getLogger(__name__)


class ClientStoreError(Exception):
    """Base class for client storage errors"""


class ClientNotFoundError(ClientStoreError):
    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"Client {client_id} not found")


class ClientConstraintError(ClientStoreError):
    """Raised when the database rejects a row (missing column, duplicate email)"""


@dataclass
class ClientPage:
    total_records: int
    current_page: int
    total_pages: int
    clients: List[Client]


class ClientService:
    def __init__(self, db: Session):
        self.db = db

    def list(self, page: int, limit: int) -> ClientPage:
        """
        Return one page of clients, newest first.

        Args:
            page: 1-based page number
            limit: Page size, must be positive

        Returns:
            ClientPage with totals and the rows of the requested page
        """
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")

        total = self.db.query(Client).count()
        clients = self.db.query(Client)\
                         .order_by(Client.created_at.desc(), Client.id.desc())\
                         .offset((page - 1) * limit)\
                         .limit(limit)\
                         .all()

        return ClientPage(
            total_records=total,
            current_page=page,
            total_pages=math.ceil(total / limit),
            clients=clients
        )

    def get(self, client_id: int) -> Client:
        client = self.db.get(Client, client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    def create(self, fields: Dict[str, Any]) -> Client:
        """Insert a client from allow-listed fields; unknown keys are ignored."""
        now = utcnow()
        client = Client(**_allowed(fields), created_at=now, updated_at=now)
        self.db.add(client)
        self._commit()
        self.db.refresh(client)

        logger.info(f"✅ Client created: {client.id}")
        return client

    def update(self, client_id: int, fields: Dict[str, Any]) -> Client:
        """Apply only the supplied fields and refresh updated_at."""
        client = self.get(client_id)

        for field, value in _allowed(fields).items():
            setattr(client, field, value)
        client.updated_at = utcnow()

        self._commit()
        self.db.refresh(client)

        logger.info(f"✅ Client {client_id} updated")
        return client

    def delete(self, client_id: int) -> None:
        client = self.get(client_id)
        self.db.delete(client)
        self.db.commit()

        logger.info(f"✅ Client {client_id} deleted")

    def _commit(self) -> None:
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise ClientConstraintError(str(e.orig)) from e


def _allowed(fields: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in fields.items() if k in MUTABLE_FIELDS}
