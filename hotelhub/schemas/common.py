from pydantic import BaseModel


class Envelope(BaseModel):
    success: bool = True
    message: str | None = None


class ErrorEnvelope(Envelope):
    success: bool = False
    code: str | None = None
    details: dict | None = None
