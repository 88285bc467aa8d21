"""
Auth Module: registration and login for users.

Owns its own database connection, separate from the registry data store.
Passwords are hashed with bcrypt; each successful login appends an entry to
the user's login history.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import sessionmaker
from starlette.concurrency import run_in_threadpool

from app.core.security import hash_password, verify_password
from app.db.init_db import init_auth_db
from app.db.session import create_db_engine, create_session_factory
from app.models.user import User
from app.schemas.user import LoginEvent, UserCredentials, UserRecord, UserRegistration
from app.services.result import ErrorKind, Result

logger = logging.getLogger(__name__)


class AuthService:

    def __init__(self, database_url: str, bcrypt_rounds: int = 10):
        self.database_url = database_url
        self.bcrypt_rounds = bcrypt_rounds
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def initialized(self) -> bool:
        return self._sessions is not None

    async def initialize(self) -> Result[None]:
        return await run_in_threadpool(self._initialize)

    def _initialize(self) -> Result[None]:
        try:
            engine = create_db_engine(self.database_url)
            with engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            init_auth_db(engine)
        except (SQLAlchemyError, ImportError) as e:
            logger.error(f"Auth store connection failed: {e}")
            return Result.failure(f"unable to connect to the user store: {e}", ErrorKind.STORE)

        self._engine = engine
        self._sessions = create_session_factory(engine)
        logger.info("Auth service initialized")
        return Result.success()

    async def close(self) -> None:
        if self._engine is not None:
            self._engine.dispose()
        self._engine = None
        self._sessions = None

    async def register_user(self, data: UserRegistration) -> Result[None]:
        if data.password != data.password2:
            return Result.failure("Passwords do not match", ErrorKind.VALIDATION)
        if not self.initialized:
            return Result.failure("There was an error creating the user: store not initialized", ErrorKind.STORE)

        try:
            hashed = await run_in_threadpool(hash_password, data.password, self.bcrypt_rounds)
        except ValueError as e:
            logger.warning(f"Password hashing failed for {data.username}: {e}")
            return Result.failure("There was an error encrypting the password", ErrorKind.VALIDATION)

        return await run_in_threadpool(self._insert_user, data, hashed)

    def _insert_user(self, data: UserRegistration, hashed: str) -> Result[None]:
        with self._sessions() as session:
            try:
                session.add(User(username=data.username, password=hashed, email=data.email, login_history=[]))
                session.commit()
            except IntegrityError:
                session.rollback()
                return Result.failure("User Name already taken", ErrorKind.STORE)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Creating user {data.username} failed: {e}")
                return Result.failure(f"There was an error creating the user: {e}", ErrorKind.STORE)
        logger.info(f"Registered user {data.username}")
        return Result.success()

    async def check_user(self, credentials: UserCredentials) -> Result[UserRecord]:
        """
        Verify a username / password pair.

        On success the login is recorded in the user's history and the user
        is returned without the password hash.
        """
        not_found = f"Unable to find user: {credentials.username}"
        if not self.initialized:
            return Result.failure(not_found, ErrorKind.STORE)

        lookup = await run_in_threadpool(self._find_user, credentials.username)
        if not lookup.ok:
            return Result.failure(not_found, lookup.kind)
        user = lookup.value

        try:
            matches = await run_in_threadpool(verify_password, credentials.password, user.password)
        except ValueError as e:
            logger.warning(f"Password comparison failed for {credentials.username}: {e}")
            return Result.failure("There was an error when comparing passwords", ErrorKind.STORE)
        if not matches:
            return Result.failure(f"Incorrect Password for user: {credentials.username}", ErrorKind.VALIDATION)

        event = LoginEvent(date_time=datetime.now(timezone.utc), user_agent=credentials.user_agent)
        return await run_in_threadpool(self._record_login, user.username, event)

    def _find_user(self, username: str) -> Result[User]:
        with self._sessions() as session:
            try:
                user = session.query(User).filter(User.username == username).first()
            except SQLAlchemyError as e:
                logger.error(f"Looking up user {username} failed: {e}")
                return Result.failure("lookup failed", ErrorKind.STORE)
        if user is None:
            return Result.failure("no such user", ErrorKind.NOT_FOUND)
        return Result.success(user)

    def _record_login(self, username: str, event: LoginEvent) -> Result[UserRecord]:
        with self._sessions() as session:
            try:
                user = session.query(User).filter(User.username == username).first()
                if user is None:
                    return Result.failure(f"Unable to find user: {username}", ErrorKind.NOT_FOUND)
                # Reassign so the JSON column is flagged dirty
                user.login_history = list(user.login_history or []) + [event.model_dump(mode="json")]
                session.commit()
                session.refresh(user)
                record = UserRecord.model_validate(user)
            except SQLAlchemyError as e:
                session.rollback()
                logger.error(f"Saving login history for {username} failed: {e}")
                return Result.failure(f"There was an error verifying the user: {e}", ErrorKind.STORE)
        logger.info(f"User {username} logged in")
        return Result.success(record)
