import pathlib

from sqlalchemy.ext.asyncio import create_async_engine

from campaign_sim.load_secrets import auth_database_url

# Player accounts are kept apart from campaign data, in a file beside the package.
USERS_DB_PATH = pathlib.Path(__file__).parent / "users.sqlite3"
sqlite_url = auth_database_url or f"sqlite+aiosqlite:///{USERS_DB_PATH}"

engine = create_async_engine(url=sqlite_url, echo=False)
