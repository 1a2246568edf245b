"""ADBOARD — Record Models (users, customers, metrics).

These are the rows the record store hands back. Derived metric columns
(ctr, cpc, cpa) are persisted alongside the raw counters but are only ever
written through `app.analyzer.kpi_engine`.
"""

import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from sqlmodel import SQLModel, Field


def _new_id() -> str:
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(str, Enum):
    """User roles, highest privilege first."""

    ADMIN = "admin"
    USER = "user"
    CLIENT = "client"


class Theme(str, Enum):
    """UI theme preference."""

    DARK = "dark"
    LIGHT = "light"
    SYSTEM = "system"


class CustomerStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"


class User(SQLModel, table=True):
    """Dashboard account. Identity itself lives with the external provider."""

    __tablename__ = "users"

    id: str = Field(default_factory=_new_id, primary_key=True)
    email: str = Field(index=True, unique=True)
    name: str = Field(default="")
    role: UserRole = Field(default=UserRole.USER, index=True)
    theme_preference: Theme = Field(default=Theme.SYSTEM)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Customer(SQLModel, table=True):
    """Advertiser whose metrics are tracked.

    `user_id` points at the client-role user who owns this customer, if any.
    At most one owner at a time.
    """

    __tablename__ = "customers"

    id: str = Field(default_factory=_new_id, primary_key=True)
    name: str = Field(index=True)
    contact_name: str = Field(default="")
    email: str = Field(default="")
    phone: Optional[str] = Field(default=None)
    status: CustomerStatus = Field(default=CustomerStatus.ACTIVE)
    date_added: str = Field(
        default_factory=lambda: _now().strftime("%Y-%m-%d"), description="YYYY-MM-DD"
    )
    user_id: Optional[str] = Field(default=None, foreign_key="users.id", index=True)
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)


class Metric(SQLModel, table=True):
    """Advertising performance for one customer and one reporting period.

    Rows are edited in place; they are not an append-only series.
    """

    __tablename__ = "metrics"

    id: str = Field(default_factory=_new_id, primary_key=True)
    customer_id: str = Field(foreign_key="customers.id", index=True)
    year: str = Field(index=True)
    month: str = Field(default="1")
    week: str = Field(default="1")
    impressions: int = Field(default=0)
    clicks: int = Field(default=0)
    conversions: int = Field(default=0)
    cost: float = Field(default=0.0)
    ctr: float = Field(default=0.0, description="Derived: clicks / impressions * 100")
    cpc: float = Field(default=0.0, description="Derived: cost / clicks")
    cpa: float = Field(default=0.0, description="Derived: cost / conversions")
    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)
