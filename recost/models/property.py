
from pydantic import BaseModel, Field


class Property(BaseModel):
    id: str
    name: str
    address: str
    is_archived: bool = False
    drive_folder_id: str | None = Field(default=None)  # Mock Google Drive folder


class NewProperty(BaseModel):
    address: str = Field(min_length=1)
