"""
Database models for the Cheezus catalogue.

This module defines SQLAlchemy ORM models for the Supabase tables and
views the search reads from. The search never writes to them; the models
exist for querying and for creating a local schema in development and tests.
"""

import uuid
from typing import Any

from sqlalchemy import Column, DateTime, Float, Index, Integer, String, Text
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

Base: Any = declarative_base()

# Status value of moderated rows that are visible in search
STATUS_APPROVED = "approved"

# Producer name used for placeholder producer cheeses
GENERIC_PRODUCER = "Generic"


def _new_id() -> str:
    return str(uuid.uuid4())


class Cheese(Base):
    """
    Legacy cheese catalogue entry.

    Attributes:
        id: Primary key identifier (UUID string)
        name: Cheese name
        description: Free-text description
        type: Cheese type (e.g. "Hard", "Soft")
        origin_country: Country of origin
        origin_region: Region of origin
        created_at: Timestamp of creation
    """

    __tablename__ = "cheeses"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    type = Column(String(100), nullable=True, index=True)
    origin_country = Column(String(100), nullable=True, index=True)
    origin_region = Column(String(100), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class CheezopediaEntry(Base):
    """
    Cheezopedia article or recipe.

    Attributes:
        id: Primary key identifier
        title: Entry title
        description: Short summary
        content_type: "article" or "recipe"
    """

    __tablename__ = "cheezopedia_entries"

    id = Column(String(36), primary_key=True, default=_new_id)
    title = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    content_type = Column(String(20), nullable=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)


class CheesePairing(Base):
    """
    Food or drink pairing.

    Attributes:
        id: Primary key identifier
        pairing: Pairing name (e.g. "Port", "Fig jam")
        type: "food" or "drink"
    """

    __tablename__ = "cheese_pairings"

    id = Column(String(36), primary_key=True, default=_new_id)
    pairing = Column(String(255), nullable=False, index=True)
    type = Column(String(20), nullable=True)


class ProducerCheeseStats(Base):
    """
    Producer cheese with aggregated rating statistics.

    Mirrors the producer_cheese_stats view: one row per producer version
    of a cheese type, with its average rating and number of ratings.
    """

    __tablename__ = "producer_cheese_stats"

    id = Column(String(36), primary_key=True, default=_new_id)
    full_name = Column(String(255), nullable=False)
    producer_name = Column(String(255), nullable=True)
    cheese_type_id = Column(String(36), nullable=True, index=True)
    cheese_type_name = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    origin_country = Column(String(100), nullable=True)
    average_rating = Column(Float, nullable=True)
    rating_count = Column(Integer, default=0, nullable=False)
    status = Column(String(20), default=STATUS_APPROVED, nullable=False)

    __table_args__ = (
        Index("idx_producer_cheese_status_rating", "status", "rating_count"),
    )


class CheeseTypeStats(Base):
    """
    Cheese type with aggregated producer statistics.

    Mirrors the cheese_type_stats view.
    """

    __tablename__ = "cheese_type_stats"

    id = Column(String(36), primary_key=True, default=_new_id)
    name = Column(String(255), nullable=False)
    type = Column(String(100), nullable=True)
    origin_country = Column(String(100), nullable=True)
    producer_count = Column(Integer, default=0, nullable=False)
    average_rating = Column(Float, nullable=True)
    status = Column(String(20), default=STATUS_APPROVED, nullable=False)

    __table_args__ = (
        Index("idx_cheese_type_status_producers", "status", "producer_count"),
    )


class CheeseBoxEntry(Base):
    """
    A cheese logged in a user's cheese box.

    Attributes:
        id: Primary key identifier
        user_id: User UUID from Supabase auth
        cheese_id: Producer cheese UUID
        created_at: Timestamp when the cheese was logged
    """

    __tablename__ = "cheese_box_entries"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), nullable=False, index=True)
    cheese_id = Column(String(36), nullable=False, index=True)
    created_at = Column(DateTime, default=func.now(), nullable=False)

    __table_args__ = (Index("idx_cheese_box_user_cheese", "user_id", "cheese_id"),)
