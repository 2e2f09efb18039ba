from pydantic import BaseModel


class StreamToken(BaseModel):
    token: str
