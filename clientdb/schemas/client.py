# clientdb/schemas/client.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime

# Fields a caller may set; everything else on the row is server-managed
MUTABLE_FIELDS = (
    "first_name",
    "last_name",
    "email",
    "phone",
    "company",
    "address",
    "city",
    "postal_code",
    "country",
)

REQUIRED_FIELDS = ("first_name", "last_name", "email")


# Request schemas
class ClientCreate(BaseModel):
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    postal_code: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=255)

    class Config:
        extra = "forbid"


class ClientUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email: Optional[str] = Field(None, min_length=1, max_length=255)
    phone: Optional[str] = Field(None, max_length=255)
    company: Optional[str] = Field(None, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    city: Optional[str] = Field(None, max_length=255)
    postal_code: Optional[str] = Field(None, max_length=255)
    country: Optional[str] = Field(None, max_length=255)

    class Config:
        extra = "forbid"

    @field_validator(*REQUIRED_FIELDS)
    @classmethod
    def required_not_null(cls, v):
        """Required columns may be omitted from an update but never cleared."""
        if v is None:
            raise ValueError("field cannot be null")
        return v


# Response schemas
class ClientResponse(BaseModel):
    id: int
    first_name: str
    last_name: str
    email: str
    phone: Optional[str]
    company: Optional[str]
    address: Optional[str]
    city: Optional[str]
    postal_code: Optional[str]
    country: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClientListResponse(BaseModel):
    total_records: int = Field(..., alias="totalRecords")
    current_page: int = Field(..., alias="currentPage")
    total_pages: int = Field(..., alias="totalPages")
    clients: list[ClientResponse]

    class Config:
        populate_by_name = True
        from_attributes = True


class MessageResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: str
