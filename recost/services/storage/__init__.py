from .document_store_base import DocumentStore
from .http_store import HttpDocumentStore
from .kv_sqlite import SQLiteKeyValueStore
from .kv_store import InMemoryKeyValueStore, KeyValueStoreBase
from .local_store import LocalDocumentStore
