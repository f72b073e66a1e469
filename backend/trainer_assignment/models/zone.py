"""
Zone model.

Zones are circular service areas. A NULL ``operator_franchise_id`` marks a
company-operated zone; otherwise the zone belongs to that franchise. Names
are unique within each operator's scope, never across scopes.
"""

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Float, Index, String, text
from sqlalchemy.sql import func

from ..core.ulid_helper import generate_ulid
from ..database import Base


class Zone(Base):
    """Circular geographic service area."""

    __tablename__ = "zones"
    __table_args__ = (
        CheckConstraint("radius_km >= 0", name="ck_zones_radius_non_negative"),
        Index(
            "uq_zones_company_name",
            "name",
            unique=True,
            postgresql_where=text("operator_franchise_id IS NULL"),
            sqlite_where=text("operator_franchise_id IS NULL"),
        ),
        Index(
            "uq_zones_franchise_name",
            "operator_franchise_id",
            "name",
            unique=True,
            postgresql_where=text("operator_franchise_id IS NOT NULL"),
            sqlite_where=text("operator_franchise_id IS NOT NULL"),
        ),
        Index("ix_zones_center", "center_lat", "center_lng"),
    )

    id = Column(String(26), primary_key=True, default=generate_ulid)
    operator_franchise_id = Column(String(64), nullable=True, index=True)
    name = Column(String(100), nullable=False)
    center_lat = Column(Float, nullable=False)
    center_lng = Column(Float, nullable=False)
    radius_km = Column(Float, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    @property
    def is_company_operated(self) -> bool:
        return self.operator_franchise_id is None

    def __repr__(self) -> str:
        owner = self.operator_franchise_id or "COMPANY"
        return f"<Zone {self.name} owner={owner} r={self.radius_km}km>"
