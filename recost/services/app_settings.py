
from typing import Literal
from loguru import logger
from .storage.kv_store import KeyValueStoreBase, SHEET_FOLDER_KEY, SCANS_FOLDER_KEY, THEME_KEY
from ..core.errors import PermissionDeniedError
from ..models import StorageFolders, User

Theme = Literal["light", "dark"]


class AppSettingsService:
    """Administrator storage locations and the UI theme preference"""

    def __init__(self, kv: KeyValueStoreBase):
        self.kv = kv

    def get_storage_folders(self) -> StorageFolders:
        return StorageFolders(
            sheet_folder=self.kv.get(SHEET_FOLDER_KEY) or "",
            scans_folder=self.kv.get(SCANS_FOLDER_KEY) or "",
        )

    def save_storage_folders(self, actor: User, folders: StorageFolders) -> StorageFolders:
        if not actor.is_admin:
            raise PermissionDeniedError(f"{actor.email} cannot change storage settings")

        self.kv.set(SHEET_FOLDER_KEY, folders.sheet_folder)
        self.kv.set(SCANS_FOLDER_KEY, folders.scans_folder)
        logger.info("Storage folders updated", updated_by=actor.id)
        return folders

    def get_theme(self) -> Theme:
        return "dark" if self.kv.get(THEME_KEY) == "dark" else "light"

    def set_theme(self, theme: Theme) -> Theme:
        self.kv.set(THEME_KEY, theme)
        return theme
