"""Error details domain model."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ErrorKind(StrEnum):
    """Classification of failures while fetching or decoding arrivals."""

    TRANSPORT = "transport"
    SERVER = "server"
    DECODE = "decode"
    NOT_FOUND = "not_found"
    EMPTY_RESULT = "empty_result"
    CATALOG_UNAVAILABLE = "catalog_unavailable"


class ErrorDetails(BaseModel):
    """Details about an error, including HTTP status code if applicable."""

    model_config = ConfigDict(frozen=True)

    kind: ErrorKind
    status_code: int | None = None
    reason: str
