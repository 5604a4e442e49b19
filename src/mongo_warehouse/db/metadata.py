"""Message-type bookkeeping stored next to each warehouse database."""

from __future__ import annotations

from pymongo import MongoClient
from pymongo.collection import Collection

from mongo_warehouse.core.errors import MessageTypeNotFoundError
from mongo_warehouse.core.logging import get_logger

logger = get_logger(module="metadata")

METADATA_COLLECTION = "ros_message_collections"


def metadata_collection(client: MongoClient, database_name: str) -> Collection:
    return client[database_name][METADATA_COLLECTION]


def message_type(client: MongoClient, database_name: str, collection_name: str) -> str:
    """Return the message type recorded for ``collection_name``.

    Raises ``MessageTypeNotFoundError`` when no metadata document names the
    collection. A document without a string ``type`` yields ``""``.
    """

    document = metadata_collection(client, database_name).find_one({"name": collection_name})
    if document is None:
        raise MessageTypeNotFoundError(database_name, collection_name)
    value = document.get("type")
    return value if isinstance(value, str) else ""


def register_message_type(
    client: MongoClient,
    database_name: str,
    collection_name: str,
    message_type: str,
    md5sum: str = "",
) -> None:
    payload = {"name": collection_name, "type": message_type, "md5sum": md5sum}
    metadata_collection(client, database_name).update_one(
        {"name": collection_name}, {"$set": payload}, upsert=True
    )
    logger.info("Registered message type", collection=collection_name, type=message_type)
