# clientdb/routers/clients.py
"""
Client Management Endpoints

Provides CRUD operations for the client directory. Every route in this
router is counted by the per-IP rate limiter.
"""

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from typing import Any, Dict
import logging

from clientdb.dependencies import get_client_service, rate_limit, PaginationParams
from clientdb.services.clients import ClientService, ClientStoreError, ClientNotFoundError
from clientdb.schemas.client import (
    ClientCreate,
    ClientUpdate,
    ClientResponse,
    ClientListResponse,
    MessageResponse
)

logger = logging.getLogger(__name__)
router = APIRouter(dependencies=[Depends(rate_limit)])


def _not_found(client_id: int) -> HTTPException:
    logger.warning(f"Client {client_id} not found")
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Client not found"
    )


def _failure(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=detail
    )


# =============================================================================
# LIST CLIENTS
# =============================================================================

@router.get("", response_model=ClientListResponse)
def list_clients(
    pagination: PaginationParams = Depends(),
    service: ClientService = Depends(get_client_service)
):
    """
    List clients, newest first.

    Supports pagination via query parameters:
    - page: Page number (default: 1)
    - limit: Items per page (default: 10, max: 100)

    Returns:
        Clients of the page with totalRecords, currentPage and totalPages
    """
    try:
        result = service.list(pagination.page, pagination.limit)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching clients: {e}")
        raise _failure("Internal Server Error")

    logger.info(f"Found {result.total_records} clients, returning page {result.current_page}")

    return ClientListResponse(
        total_records=result.total_records,
        current_page=result.current_page,
        total_pages=result.total_pages,
        clients=[ClientResponse.model_validate(c) for c in result.clients]
    )


# =============================================================================
# GET SINGLE CLIENT
# =============================================================================

@router.get("/{client_id}", response_model=ClientResponse)
def get_client(
    client_id: int,
    service: ClientService = Depends(get_client_service)
):
    """
    Get a specific client by ID.

    Raises:
        404: Client not found
    """
    try:
        return service.get(client_id)
    except ClientNotFoundError:
        raise _not_found(client_id)
    except SQLAlchemyError as e:
        logger.error(f"Error fetching client {client_id}: {e}")
        raise _failure("Internal Server Error")


# =============================================================================
# CREATE CLIENT
# =============================================================================

@router.post("", response_model=ClientResponse, status_code=status.HTTP_201_CREATED)
def create_client(
    payload: Dict[str, Any] = Body(...),
    service: ClientService = Depends(get_client_service)
):
    """
    Create a new client.

    Missing required fields, unknown fields and duplicate emails all
    answer 500 "Failed to create client".
    """
    try:
        client_data = ClientCreate.model_validate(payload)
        return service.create(client_data.model_dump())
    except (ValidationError, ClientStoreError, SQLAlchemyError) as e:
        logger.error(f"Error creating client: {e}")
        raise _failure("Failed to create client")


# =============================================================================
# UPDATE CLIENT
# =============================================================================

@router.put("/{client_id}", response_model=ClientResponse)
def update_client(
    client_id: int,
    payload: Dict[str, Any] = Body(...),
    service: ClientService = Depends(get_client_service)
):
    """
    Update a client's information.

    Only provided fields will be updated (partial update).

    Raises:
        404: Client not found
    """
    try:
        service.get(client_id)
        update_data = ClientUpdate.model_validate(payload).model_dump(exclude_unset=True)
        return service.update(client_id, update_data)
    except ClientNotFoundError:
        raise _not_found(client_id)
    except (ValidationError, ClientStoreError, SQLAlchemyError) as e:
        logger.error(f"Error updating client {client_id}: {e}")
        raise _failure("Failed to update client")


# =============================================================================
# DELETE CLIENT
# =============================================================================

@router.delete("/{client_id}", response_model=MessageResponse)
def delete_client(
    client_id: int,
    service: ClientService = Depends(get_client_service)
):
    """
    Delete a client permanently.

    Raises:
        404: Client not found
    """
    try:
        service.delete(client_id)
    except ClientNotFoundError:
        raise _not_found(client_id)
    except (ClientStoreError, SQLAlchemyError) as e:
        logger.error(f"Error deleting client {client_id}: {e}")
        raise _failure("Failed to delete client")

    return MessageResponse(message="Client deleted successfully")
