"""Common schemas used across the API."""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model exposing camelCase field names on the wire.

    Python code uses snake_case attributes; request bodies are accepted in
    either form and responses are always rendered with camelCase aliases.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(BaseModel):
    """Simple message response for operations that return only a message."""

    message: str = Field(..., description="Human-readable message")
