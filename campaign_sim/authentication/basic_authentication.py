import argparse
import asyncio
import secrets

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBasic, HTTPBasicCredentials
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from campaign_sim.authentication.basic_authentication_crud import (
    CreateAuthentication,
    ReadAuthentication,
    hash_password,
)
from campaign_sim.create_sqlite_engine import engine
from campaign_sim.models.basic_authentication_models import UserModel

security = HTTPBasic()
create_auth = CreateAuthentication()
read_auth = ReadAuthentication()


class BasicAuthentication:
    def __init__(self, engine: AsyncEngine = engine):
        self.engine = engine
        self.Session = async_sessionmaker(autocommit=False, class_=AsyncSession, bind=engine)

    async def check_user_data(
        self, credentials: HTTPBasicCredentials = Depends(security)
    ) -> UserModel:
        """Check the caller's credentials. The username becomes the campaign owner.

        Args:
            credentials (HTTPBasicCredentials, optional): Defaults to Depends(security).

        Raises:
            HTTPException: The user is not found in the database
            HTTPException: The password is incorrect

        Returns:
            UserModel: The authenticated user
        """
        async with self.Session() as session:
            user_data = await read_auth.read_user_data(credentials.username, session)
        if user_data is None:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid username",
                headers={"WWW-Authenticate": "Basic"},
            )

        hashed_password = hash_password(credentials.password, user_data.salt)
        if not secrets.compare_digest(hashed_password, user_data.hash_password):
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid password",
                headers={"WWW-Authenticate": "Basic"},
            )
        return user_data

    async def create_table(self) -> None:
        await create_auth.create_table(self.engine)

    async def store_user_data(self, user_name: str, password: str) -> UserModel:
        async with self.Session() as session:
            return await create_auth.create_user_data(user_name, password, session)

    async def read_user_data(self, user_name: str) -> UserModel | None:
        async with self.Session() as session:
            return await read_auth.read_user_data(user_name, session)


basic_auth = BasicAuthentication()


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Basic Authentication")
    parser.add_argument("--username", type=str, help="Username", required=True)
    parser.add_argument("--password", type=str, help="Password", required=True)
    return parser


async def main(user_name: str, password: str):
    await basic_auth.create_table()
    await basic_auth.store_user_data(user_name, password)
    user_data = await basic_auth.read_user_data(user_name)
    print(user_data.username, user_data.hash_password, user_data.salt)


if __name__ == "__main__":
    parser = get_parser()
    args = parser.parse_args()
    asyncio.run(main(args.username, args.password))
