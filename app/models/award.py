from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Date, UniqueConstraint
from sqlalchemy.sql import func
from app.db.base_class import Base


class Badge(Base):
    __tablename__ = "badges"
    __table_args__ = (UniqueConstraint("user_id", "roadmap_id", name="uq_badge_user_roadmap"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True)

    recipient_name = Column(String(255), nullable=True)
    roadmap_name = Column(String(255), nullable=True)
    completion_date = Column(Date, nullable=True)
    url = Column(String(500), nullable=True)

    issued_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())


class Certificate(Base):
    __tablename__ = "certificates"
    __table_args__ = (UniqueConstraint("user_id", "roadmap_id", name="uq_certificate_user_roadmap"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    roadmap_id = Column(Integer, ForeignKey("roadmaps.id", ondelete="CASCADE"), nullable=False, index=True)

    recipient_name = Column(String(255), nullable=True)
    roadmap_name = Column(String(255), nullable=True)
    completion_date = Column(Date, nullable=True)
    url = Column(String(500), nullable=True)

    issued_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())
