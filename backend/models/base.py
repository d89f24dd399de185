# backend/models/base.py

"""
Base module for SQLAlchemy models:
- declarative base class `Base`
- mixin `BaseModel` with to_dict()
- create_tables() used at application startup
"""

import logging
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base

logger = logging.getLogger(__name__)

Base = declarative_base()

class BaseModel:
    """
    Mixin for SQLAlchemy models, adds to_dict().
    """
    def to_dict(self):
        return {col.name: getattr(self, col.name) for col in self.__table__.columns}

def create_tables(engine):
    """
    Create every table described by the models.
    """
    try:
        Base.metadata.create_all(engine)
        logger.info("All model tables created successfully")
    except SQLAlchemyError as e:
        logger.error(f"Error creating tables: {str(e)}")
        raise
