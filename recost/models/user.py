
from enum import Enum
from pydantic import BaseModel


class UserRole(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"


class User(BaseModel):
    id: str
    email: str
    name: str
    role: UserRole
    avatar_url: str | None = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class StorageFolders(BaseModel):
    """Administrator-configured Drive locations for the sheet and the scans"""
    sheet_folder: str = ""
    scans_folder: str = ""
