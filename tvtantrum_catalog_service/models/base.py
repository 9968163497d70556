"""Declarative base for all catalog models."""
from sqlalchemy.orm import declarative_base

Base = declarative_base()
