"""API response models not covered by the domain models"""

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Body of every error response, and of the welcome route"""
    message: str


class TaskDeletedResponse(BaseModel):
    id: str


class HealthResponse(BaseModel):
    status: str
    storage: str
