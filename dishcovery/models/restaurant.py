"""Restaurant model (curated or community-contributed places)."""
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Float, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID as PG_UUID
from sqlalchemy.orm import relationship

from dishcovery.db.session import Base


class Restaurant(Base):
    __tablename__ = "restaurants"

    id = Column(PG_UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    address = Column(Text, nullable=True)
    cover_image = Column(Text, nullable=True)
    photos = Column(JSONB, nullable=True)  # Array of image URLs
    food_types = Column(JSONB, nullable=True)  # Cuisine tags
    categories = Column(JSONB, nullable=True)  # Browse categories, e.g. street-food, late-night
    price_range = Column(String(20), nullable=True)
    rating = Column(Float, nullable=True)
    google_maps_url = Column(Text, nullable=True)
    lat = Column(Float, nullable=True)
    lng = Column(Float, nullable=True)
    landmark_notes = Column(Text, nullable=True)
    posts_count = Column(Integer, default=0)
    verified = Column(Boolean, default=False)
    status = Column(String(20), nullable=False, default="community")  # community | verified
    created_at = Column(DateTime, default=datetime.utcnow)

    posts = relationship("Post", back_populates="restaurant")
