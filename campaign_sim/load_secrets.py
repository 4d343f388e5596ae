import os
from dotenv import load_dotenv

load_dotenv()

user = os.getenv("DB_USER", "postgres")
password = os.getenv("DB_PASSWORD", "postgres")
host = os.getenv("DB_HOST", "localhost")
port = os.getenv("DB_PORT", "5432")
db_name = os.getenv("DB_NAME", "campaign_sim")
# Overrides the Postgres settings above when set (e.g. a sqlite+aiosqlite URL).
database_url = os.getenv("DATABASE_URL")
auth_database_url = os.getenv("AUTH_DATABASE_URL")
pepper_data = os.getenv("PEPPER_DATA", "")
redis_host = os.getenv("REDIS_HOST", "redis")
redis_port = int(os.getenv("REDIS_PORT", "6379"))

if __name__ == "__main__":
    print(user, host, port, db_name, database_url, auth_database_url, redis_host, redis_port)
