"""Base model configuration for all Pydantic models."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GongBaseModel(BaseModel):
    """Base model with common configuration for all models.

    Configuration:
    - alias_generator=to_camel: Fields serialize with Gong's camelCase names
    - populate_by_name=True: Accept snake_case names as well as aliases
    - extra="forbid": Reject unexpected fields (strict validation)
    - validate_assignment=True: Validate on attribute assignment

    Whitespace is left untouched; transcript text is passed through verbatim.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        validate_assignment=True,
    )

    def to_payload(self) -> dict:
        """Serialize for a tool response (camelCase keys, unset optionals dropped)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
