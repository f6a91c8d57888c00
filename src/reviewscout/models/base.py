"""Base record class for all domain models."""

from pydantic import BaseModel, ConfigDict


class BaseRecord(BaseModel):
    """Base class for persisted records.

    Provides standard validation and serialization config.
    Identifiers are assigned by the store, so ``id`` lives on subclasses.
    """

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_default=True,
        from_attributes=True,
    )
