import hashlib
import logging
import secrets

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

from campaign_sim.load_secrets import pepper_data
from campaign_sim.models.basic_authentication_models import UserModel
from campaign_sim.models.basic_authentication_schemas import Base, UserTable


def hash_password(password: str, salt: str) -> str:
    return hashlib.sha256((password + salt + pepper_data).encode()).hexdigest()


class CreateAuthentication:

    @staticmethod
    async def create_table(engine: AsyncEngine) -> None:
        """Create the users table if not exists"""
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    @staticmethod
    async def create_user_data(username: str, password: str, session: AsyncSession) -> UserModel:
        """Create user data to authenticate the user

        Args:
            username (str): Login name, also the owner of the user's campaigns
            password (str): Plain password, only its salted and peppered hash is stored

        Returns:
            UserModel: The stored user
        """
        salt = secrets.token_hex(8)
        user = UserModel(username=username, hash_password=hash_password(password, salt), salt=salt)
        try:
            session.add(UserTable(**user.model_dump()))
            await session.commit()
        except SQLAlchemyError as e:
            logging.error(f"Error creating user data: {e}")
            raise
        return user


class ReadAuthentication:
    @staticmethod
    async def read_user_data(username: str, session: AsyncSession) -> UserModel | None:
        """Read user data to get salt and password hash

        Args:
            username (str): username of the user

        Returns:
            UserModel: username, password hash and salt, None if the user does not exist
        """
        try:
            stmt = select(UserTable).where(UserTable.username == username)
            result = await session.execute(stmt)
            result = result.scalars().first()
            if result is None:
                logging.info(f"User not found: {username}")
                return None
            return UserModel.model_validate(result)
        except SQLAlchemyError as e:
            logging.error(f"Error reading user data: {e}")
            raise
