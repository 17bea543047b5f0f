"""
Title Cache Model for storing provider title data locally
Reviews point at this table so a review page never needs the external API
"""
from sqlalchemy import Column, Integer, String, Text
from sqlalchemy.orm import relationship
from filmreview.database import Base


class TitleCache(Base):
    """
    Permanent mirror of one external title, deduplicated by title_id

    Attributes:
        id: Primary key
        title_id: Provider title identifier (e.g. tt0111161), unique
        title: Primary title
        plot: Plot summary
        image: Primary image URL
    """
    __tablename__ = "cache"

    id = Column(Integer, primary_key=True, index=True)
    title_id = Column(String(32), unique=True, nullable=False)
    title = Column(String(500))
    plot = Column(Text)
    image = Column(String(1000))

    reviews = relationship("Review", back_populates="cache")

    def __repr__(self):
        return f"<TitleCache(title_id={self.title_id}, title='{self.title}')>"
