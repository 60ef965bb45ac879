"""Base Pydantic model for API payloads (camelCase on the wire)."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """
    Serializes snake_case attributes as camelCase JSON keys.

    Incoming payloads may use either form; ORM objects can be validated
    directly (from_attributes).
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )
