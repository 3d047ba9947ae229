"""
Database handle

One MongoClient is opened at startup and closed at shutdown. Request handlers
receive the database through the ``get_db`` dependency.
"""

import logging
from typing import Optional

from fastapi import Request
from pymongo import ASCENDING, MongoClient
from pymongo.database import Database

from config import Settings

logger = logging.getLogger(__name__)

SALES = "sales"
USERS = "users"


class Store:
    def __init__(self, client: MongoClient, db: Database):
        self.client = client
        self.db = db

    def close(self) -> None:
        self.client.close()


def connect(settings: Settings, client: Optional[MongoClient] = None) -> Store:
    if client is None:
        client = MongoClient(settings.mongo_uri)
    db = client[settings.mongo_dbname]
    db[USERS].create_index([("email", ASCENDING)], unique=True)
    logger.info("Connected to database %s", settings.mongo_dbname)
    return Store(client, db)


def get_db(request: Request) -> Database:
    return request.app.state.store.db


def ping(db: Database) -> bool:
    db.command("ping")
    return True
