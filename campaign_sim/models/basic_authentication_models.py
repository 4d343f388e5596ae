from pydantic import BaseModel


class UserModel(BaseModel):
    """A player account for basic authentication. Owns campaigns and research."""
    username: str
    hash_password: str
    salt: str

    class Config:
        from_attributes = True
