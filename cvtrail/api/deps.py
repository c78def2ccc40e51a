"""Shared FastAPI dependencies."""

from fastapi import Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..services import GenerationPipeline, VersionChainManager


def get_pipeline(db: Session = Depends(get_db)) -> GenerationPipeline:
    """Pipeline with collaborators built from settings."""
    return GenerationPipeline(db)


def get_chain_manager(db: Session = Depends(get_db)) -> VersionChainManager:
    return VersionChainManager(db)
