from typing import Literal

from pydantic import BaseModel, Field

from hotelhub.schemas.common import Envelope


class AccountCreate(BaseModel):
    username: str = Field(min_length=1, max_length=64)
    role: Literal["admin", "merchant"]
    display_name: str = Field(default="", max_length=200)


class AccountKeyOut(Envelope):
    account_id: int
    username: str
    role: str
    api_key: str


class MeOut(Envelope):
    account_id: int
    username: str
    display_name: str
    role: str
    api_key_id: int
