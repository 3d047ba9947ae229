import logging
from typing import Any, Dict

from pymongo.database import Database
from pymongo.errors import DuplicateKeyError

from config import Settings
from database import USERS
from errors import DuplicateRecord, InvalidCredentials
from schemas import LoginIn, UserIn
from security import hash_password, issue_token, verify_password

logger = logging.getLogger(__name__)


def create_user(db: Database, data: UserIn) -> Dict[str, Any]:
    email = data.email.lower()
    if db[USERS].find_one({"email": email}):
        raise DuplicateRecord("Email already registered")
    try:
        result = db[USERS].insert_one({"email": email, "password": hash_password(data.password)})
    except DuplicateKeyError:
        # Lost a race with a concurrent registration
        raise DuplicateRecord("Email already registered")
    logger.info("User %s created", result.inserted_id)
    # Never send password hash
    return {"id": str(result.inserted_id), "email": email}


def _password_matches(password: str, hashed) -> bool:
    if not hashed:
        return False
    try:
        return verify_password(password, hashed)
    except ValueError:
        # Stored value is not a hash passlib recognises
        logger.warning("Unusable password hash on record")
        return False


def login(db: Database, data: LoginIn, settings: Settings) -> str:
    user = db[USERS].find_one({"email": data.email.lower()})
    if not user or not _password_matches(data.password, user.get("password")):
        logger.warning("Failed login for %s", data.email)
        raise InvalidCredentials("Invalid email or password")
    logger.info("User %s logged in", user["_id"])
    return issue_token(str(user["_id"]), user["email"], settings)
