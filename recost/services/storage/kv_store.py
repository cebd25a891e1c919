"""
Key-value persistence standing in for browser local storage.

Values are JSON strings, keyed by the names below. Implementations can use:
- A plain dict (for testing/demo)
- SQLite (for a single-instance deployment that survives restarts)
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

PROPERTIES_KEY = "recost_properties"
INVOICES_KEY = "recost_invoices"
CURRENT_USER_KEY = "recost_current_user"
USERS_KEY = "recost_users"
THEME_KEY = "recost_theme"
SHEET_FOLDER_KEY = "recost_sheet_folder"
SCANS_FOLDER_KEY = "recost_scans_folder"
COMMITTED_EXTERNAL_KEY = "recost_committed_external"


class KeyValueStoreBase(ABC):
    """Synchronous, non-transactional string store"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key was never set
        """
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Write a value, replacing any previous one"""
        pass

    @abstractmethod
    def remove(self, key: str) -> None:
        """Delete a key; missing keys are ignored"""
        pass


class InMemoryKeyValueStore(KeyValueStoreBase):
    def __init__(self):
        self._data: Dict[str, str] = {}

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()
