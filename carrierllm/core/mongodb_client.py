"""
MongoDB client singleton for database operations.
Provides connection management and collection access.
"""

from typing import Optional
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.collection import Collection

from carrierllm.config import get_settings


_client: Optional[MongoClient] = None


def get_mongodb_client() -> MongoClient:
    """
    Get MongoDB client singleton.
    The connection is established lazily on first operation.
    """
    global _client
    if _client is None:
        settings = get_settings()
        _client = MongoClient(settings.mongodb_uri, serverSelectionTimeoutMS=5000)
    return _client


def get_database() -> Database:
    """Get the configured database."""
    client = get_mongodb_client()
    settings = get_settings()
    return client[settings.mongodb_database]


def get_collection(collection_name: str) -> Collection:
    """Get a specific collection from the database."""
    db = get_database()
    return db[collection_name]


def ping() -> bool:
    """Return True if the MongoDB deployment answers a ping."""
    client = get_mongodb_client()
    client.admin.command("ping")
    return True


def close_mongodb_client() -> None:
    """Close the MongoDB client connection."""
    global _client
    if _client is not None:
        _client.close()
        _client = None
