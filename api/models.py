from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Rando(BaseModel):
    """A synthetic person record.

    All attributes are optional so projected results only carry the
    attributes that were requested.
    """
    model_config = ConfigDict(populate_by_name=True)

    rando_id: Optional[str] = Field(default=None, alias="randoID", description="Unique identifier for the user")
    created_at: Optional[datetime] = Field(default=None, alias="createdAt", description="Date the user was created")
    email: Optional[str] = Field(default=None, description="Email address of the user")
    favorite_color: Optional[str] = Field(default=None, alias="favoriteColor", description="Favorite color of the user")
    first_name: Optional[str] = Field(default=None, alias="firstName", description="First name of the user")
    last_name: Optional[str] = Field(default=None, alias="lastName", description="Last name of the user")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt", description="Date the user was last updated")


class PageOptions(BaseModel):
    limit: int
    offset: int


class QueryOptionsModel(BaseModel):
    """Query options echoed back after pagination defaults were applied"""
    filter: Dict[str, List[str]] = {}
    sort: List[str] = []
    page: PageOptions
    fields: List[str] = []


class SearchResponse(BaseModel):
    data: List[Rando]
    options: QueryOptionsModel
    total: int


class HealthResponse(BaseModel):
    status: str
    database: str
