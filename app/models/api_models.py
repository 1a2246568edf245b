"""ADBOARD — Request / Response Schemas."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator

from app.analyzer.trend_engine import month_number, week_number
from app.models.domain_models import CustomerStatus, Theme, UserRole


def _check_period(field: str, value: Optional[str]) -> Optional[str]:
    """Reject period labels that cannot be placed in calendar order."""
    if value is None:
        return value
    if field == "year" and not value.strip().isdigit():
        raise ValueError("year must be numeric, e.g. \"2024\"")
    if field == "month" and not 1 <= month_number(value) <= 12:
        raise ValueError("month must be a month name or 1-12, e.g. \"March\"")
    if field == "week" and week_number(value) < 1:
        raise ValueError("week must be numbered, e.g. \"Week 2\"")
    return value.strip()


# ── Metrics ──


class MetricCreate(BaseModel):
    """Request body for POST /metrics. Derived ratios are never accepted."""

    customer_id: str
    year: str
    month: str
    week: str
    impressions: int = Field(default=0, ge=0)
    clicks: int = Field(default=0, ge=0)
    conversions: int = Field(default=0, ge=0)
    cost: float = Field(default=0.0, ge=0)

    @field_validator("year", "month", "week")
    @classmethod
    def _valid_period(cls, value, info):
        return _check_period(info.field_name, value)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "customer_id": "c0ffee00-0000-0000-0000-000000000001",
                    "year": "2024",
                    "month": "March",
                    "week": "Week 1",
                    "impressions": 12500,
                    "clicks": 450,
                    "conversions": 25,
                    "cost": 1200,
                }
            ]
        }
    }


class MetricUpdate(BaseModel):
    """Request body for PUT /metrics/{id}. Every field is optional."""

    year: Optional[str] = None
    month: Optional[str] = None
    week: Optional[str] = None
    impressions: Optional[int] = Field(default=None, ge=0)
    clicks: Optional[int] = Field(default=None, ge=0)
    conversions: Optional[int] = Field(default=None, ge=0)
    cost: Optional[float] = Field(default=None, ge=0)

    @field_validator("year", "month", "week")
    @classmethod
    def _valid_period(cls, value, info):
        return _check_period(info.field_name, value)


# ── Customers ──


class CustomerCreate(BaseModel):
    name: str = Field(min_length=1)
    contact_name: str = ""
    email: str = ""
    phone: Optional[str] = None
    status: CustomerStatus = CustomerStatus.ACTIVE
    date_added: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    contact_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    status: Optional[CustomerStatus] = None


# ── Users ──


class UserCreate(BaseModel):
    """Profile row for an account already registered with the identity provider."""

    id: Optional[str] = None
    email: str = Field(min_length=3)
    name: str = ""
    role: UserRole = UserRole.USER


class UserUpdate(BaseModel):
    name: Optional[str] = None
    role: Optional[UserRole] = None


class ThemeUpdate(BaseModel):
    theme: Theme


# ── Assignments ──


class AssignmentRequest(BaseModel):
    """Request body for POST /admin/assignments."""

    customer_id: str
    user_id: str
    expected_updated_at: Optional[datetime] = None
    """Optional check-and-set guard against concurrent reassignment."""


# ── Documents ──


class DocumentEntry(BaseModel):
    """A file attached to a customer."""

    name: str
    path: str
    url: str = ""
    size: int = 0
    content_type: str = ""
    updated_at: Optional[str] = None
