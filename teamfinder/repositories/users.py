"""
User account repositories of the user service
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ASCENDING, IndexModel, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from teamfinder.core.errors import StoreUnavailableError
from teamfinder.core.logger import logger
from teamfinder.core.results import Result
from teamfinder.models.team import utc_now
from teamfinder.models.user import USER_PROFILE_FIELDS, User, normalize_email


class UserRepository(ABC):
    """Abstract base class for user account storage"""

    @abstractmethod
    async def create(self, user: User) -> Result:
        """
        Returns:
            OK when inserted, CONFLICT when the email or username is taken
        """

    @abstractmethod
    async def get(self, user_id: str) -> Optional[User]:
        pass

    @abstractmethod
    async def list(self) -> List[User]:
        pass

    @abstractmethod
    async def update(self, user_id: str, changes: Dict[str, Any]) -> Result:
        """
        Returns:
            OK with the updated `user`, NOT_FOUND when unknown, CONFLICT when
            the new email or username is taken
        """

    @abstractmethod
    async def delete(self, user_id: str) -> Result:
        pass

    async def ensure_indexes(self) -> None:
        return None


class InMemoryUserRepository(UserRepository):
    """Dictionary-backed UserRepository"""

    def __init__(self):
        self._lock = asyncio.Lock()
        self.accounts: Dict[str, User] = {}

    def _taken(self, user_id: str, email: Optional[str], username: Optional[str]) -> Optional[str]:
        for other in self.accounts.values():
            if other.id == user_id:
                continue
            if email is not None and other.email.lower() == email.lower():
                return "Email already registered"
            if username is not None and other.username == username:
                return "Username already taken"
        return None

    async def create(self, user: User) -> Result:
        async with self._lock:
            if user.id in self.accounts:
                return Result.conflict(f"User {user.id} already exists")
            taken = self._taken(user.id, user.email, user.username)
            if taken:
                return Result.conflict(taken)
            self.accounts = {**self.accounts, user.id: user.model_copy()}
            return Result.ok()

    async def get(self, user_id: str) -> Optional[User]:
        user = self.accounts.get(user_id)
        return user.model_copy() if user else None

    async def list(self) -> List[User]:
        return [u.model_copy() for u in self.accounts.values()]

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Result:
        async with self._lock:
            user = self.accounts.get(user_id)
            if user is None:
                return Result.not_found(f"User {user_id} not found")
            fields = {k: v for k, v in changes.items() if k in USER_PROFILE_FIELDS}
            if fields.get("email") is not None:
                fields["email"] = normalize_email(fields["email"])
            taken = self._taken(user_id, fields.get("email"), fields.get("username"))
            if taken:
                return Result.conflict(taken)
            updated = user.model_copy(update={**fields, "updated_at": utc_now()})
            self.accounts = {**self.accounts, user_id: updated}
            return Result.ok(user=updated.model_copy())

    async def delete(self, user_id: str) -> Result:
        async with self._lock:
            if user_id not in self.accounts:
                return Result.not_found(f"User {user_id} not found")
            self.accounts = {uid: u for uid, u in self.accounts.items() if uid != user_id}
            return Result.ok()


class MongoUserRepository(UserRepository):
    """UserRepository backed by the `accounts` collection"""

    def __init__(self, database: AsyncIOMotorDatabase):
        self.collection = database["accounts"]
        self._indexes_created = False

    async def ensure_indexes(self) -> None:
        if self._indexes_created:
            return
        try:
            await self.collection.create_indexes([
                IndexModel([("email", ASCENDING)], unique=True, name="email_unique"),
                IndexModel([("username", ASCENDING)], unique=True, name="username_unique"),
            ])
        except PyMongoError as e:
            self._unavailable("creating indexes", e)
        self._indexes_created = True
        logger.info("User repository indexes created")

    def _unavailable(self, operation: str, error: PyMongoError):
        logger.error(f"MongoDB error {operation}", error=error)
        raise StoreUnavailableError(f"Database error {operation}") from error

    @staticmethod
    def _conflict(error: DuplicateKeyError) -> Result:
        key = (error.details or {}).get("keyPattern", {})
        if "email" in key:
            return Result.conflict("Email already registered")
        if "username" in key:
            return Result.conflict("Username already taken")
        return Result.conflict("User already exists")

    @staticmethod
    def _doc_to_user(doc: Dict[str, Any]) -> User:
        doc = dict(doc)
        doc["id"] = str(doc.pop("_id"))
        return User(**doc)

    async def create(self, user: User) -> Result:
        doc = user.model_dump()
        doc["_id"] = doc.pop("id")
        try:
            await self.collection.insert_one(doc)
            return Result.ok()
        except DuplicateKeyError as e:
            return self._conflict(e)
        except PyMongoError as e:
            self._unavailable("creating user", e)

    async def get(self, user_id: str) -> Optional[User]:
        try:
            doc = await self.collection.find_one({"_id": user_id})
        except PyMongoError as e:
            self._unavailable("getting user", e)
        return self._doc_to_user(doc) if doc else None

    async def list(self) -> List[User]:
        try:
            docs = await self.collection.find().to_list(length=None)
        except PyMongoError as e:
            self._unavailable("listing users", e)
        return [self._doc_to_user(doc) for doc in docs]

    async def update(self, user_id: str, changes: Dict[str, Any]) -> Result:
        fields = {k: v for k, v in changes.items() if k in USER_PROFILE_FIELDS}
        if fields.get("email") is not None:
            fields["email"] = normalize_email(fields["email"])
        fields["updated_at"] = utc_now()
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": user_id},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError as e:
            return self._conflict(e)
        except PyMongoError as e:
            self._unavailable("updating user", e)
        if doc is None:
            return Result.not_found(f"User {user_id} not found")
        return Result.ok(user=self._doc_to_user(doc))

    async def delete(self, user_id: str) -> Result:
        try:
            result = await self.collection.delete_one({"_id": user_id})
        except PyMongoError as e:
            self._unavailable("deleting user", e)
        if result.deleted_count == 0:
            return Result.not_found(f"User {user_id} not found")
        return Result.ok()
