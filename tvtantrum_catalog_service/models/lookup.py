"""Theme and platform vocabularies."""
from sqlalchemy import Column, Integer, String, Text

from tvtantrum_catalog_service.models.base import Base


class Theme(Base):
    __tablename__ = "themes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)

    def __repr__(self):
        return f"<Theme(id={self.id}, name='{self.name}')>"


class Platform(Base):
    __tablename__ = "platforms"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    url = Column(Text, nullable=True)
    icon_url = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Platform(id={self.id}, name='{self.name}')>"
