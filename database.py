import logging
from typing import Any, Dict, Optional
from urllib.parse import quote_plus

from bson import ObjectId
from bson.errors import InvalidId
from fastapi import HTTPException
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError
from pymongo.server_api import ServerApi

import config

logger = logging.getLogger(__name__)

ASSIGNMENTS = "assignments"
SUBMISSIONS = "submittedAssignments"
FEATURED = "featured"
FAQS = "faqs"


def build_database_url(
    database_url: Optional[str] = None,
    user: Optional[str] = None,
    password: Optional[str] = None,
    cluster: str = config.DB_CLUSTER,
) -> str:
    """Pick the connection string: explicit URL, Atlas credentials, or a local server."""
    if database_url:
        return database_url
    if user and password:
        return (
            f"mongodb+srv://{quote_plus(user)}:{quote_plus(password)}@{cluster}/"
            "?retryWrites=true&w=majority"
        )
    return "mongodb://localhost:27017"


DATABASE_URL = build_database_url(config.DATABASE_URL, config.DB_USER, config.DB_PASS)
client = MongoClient(
    DATABASE_URL,
    server_api=ServerApi("1", strict=True, deprecation_errors=True),
    serverSelectionTimeoutMS=5000,
)
db = client[config.DATABASE_NAME]


def get_db() -> Database:
    return db


def ping(database: Database) -> bool:
    try:
        database.client.admin.command("ping")
    except PyMongoError as e:
        logger.warning("MongoDB ping failed: %s", e)
        return False
    logger.info("Pinged your deployment. You successfully connected to MongoDB!")
    return True


# Helpers

def to_object_id(id_str: str) -> ObjectId:
    try:
        return ObjectId(id_str)
    except (InvalidId, TypeError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid id format: {e}")


def to_dict(doc: Optional[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    if not doc:
        return doc
    doc["_id"] = str(doc["_id"])
    return doc
