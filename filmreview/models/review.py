from sqlalchemy import Column, Integer, Float, String, Text, DateTime, ForeignKey
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
from filmreview.database import Base


class Review(Base):
    __tablename__ = "review"

    id = Column(Integer, primary_key=True, index=True)
    # No ondelete: removing a cache row that still has reviews is not supported
    cache_id = Column(Integer, ForeignKey("cache.id"), nullable=False, index=True)
    rating = Column(Float)  # 0-5
    title = Column(String(255))
    content = Column(Text)
    author = Column(String(255))
    date = Column(DateTime(timezone=True), server_default=func.now())

    cache = relationship("TitleCache", back_populates="reviews")

    def __repr__(self):
        return f"<Review(id={self.id}, cache_id={self.cache_id}, title='{self.title}')>"
