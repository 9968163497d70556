"""Catalog TV show and its theme index."""
from sqlalchemy import Boolean, Column, ForeignKey, Index, Integer, String, Text
from sqlalchemy.dialects.mysql import JSON
from sqlalchemy.orm import relationship

from tvtantrum_catalog_service.models.base import Base


class TvShow(Base):
    """A children's TV show with its sensory ratings.

    ``themes`` and ``available_on`` are the display copies; filtering uses
    the ``tv_show_themes`` index kept in sync by ShowRepository.
    """
    __tablename__ = "tv_shows"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    age_range = Column(String(50), nullable=False)
    episode_length = Column(Integer, nullable=False)  # minutes
    creator = Column(String(255), nullable=True)
    release_year = Column(Integer, nullable=True)
    end_year = Column(Integer, nullable=True)
    is_ongoing = Column(Boolean, default=True)
    seasons = Column(Integer, nullable=True)

    # Legacy imports may lack a score; writes through the service require one
    stimulation_score = Column(Integer, nullable=True)
    interactivity_level = Column(String(50), nullable=True)
    dialogue_intensity = Column(String(50), nullable=True)
    sound_effects_level = Column(String(50), nullable=True)
    music_tempo = Column(String(50), nullable=True)
    total_music_level = Column(String(50), nullable=True)
    total_sound_effect_time_level = Column(String(50), nullable=True)
    scene_frequency = Column(String(50), nullable=True)
    creativity_rating = Column(Integer, nullable=True)

    available_on = Column(JSON, nullable=True)
    themes = Column(JSON, nullable=True)
    animation_style = Column(String(255), nullable=True)
    image_url = Column(Text, nullable=True)
    is_featured = Column(Boolean, default=False, nullable=False)

    subscriber_count = Column(String(50), nullable=True)
    video_count = Column(String(50), nullable=True)
    channel_id = Column(String(255), nullable=True)
    is_youtube_channel = Column(Boolean, default=False)
    published_at = Column(String(50), nullable=True)
    has_omdb_data = Column(Boolean, default=False)
    has_youtube_data = Column(Boolean, default=False)

    theme_index = relationship(
        "TvShowTheme",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        Index("idx_tv_shows_age_range", "age_range"),
        Index("idx_tv_shows_stimulation_score", "stimulation_score"),
    )

    def to_row(self) -> dict:
        """Column values keyed by column name (snake_case)."""
        return {column.name: getattr(self, column.key) for column in self.__table__.columns}

    def __repr__(self):
        return f"<TvShow(id={self.id}, name='{self.name}')>"


class TvShowTheme(Base):
    """One (show, theme) pair of the theme index."""
    __tablename__ = "tv_show_themes"

    id = Column(Integer, primary_key=True, autoincrement=True)
    tv_show_id = Column(Integer, ForeignKey("tv_shows.id", ondelete="CASCADE"), nullable=False)
    theme = Column(String(255), nullable=False)

    __table_args__ = (
        Index("idx_tv_show_themes_show", "tv_show_id"),
        Index("idx_tv_show_themes_theme", "theme", "tv_show_id"),
    )

    def __repr__(self):
        return f"<TvShowTheme(tv_show_id={self.tv_show_id}, theme='{self.theme}')>"
