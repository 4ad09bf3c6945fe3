"""Shared base model for records exchanged with the app."""

from pydantic import BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Record whose app-facing field names are camelCase aliases."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_nulls(cls, data: object) -> object:
        """Treat null values as missing so field defaults apply."""
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data

    def to_fields(self, **kwargs: object) -> dict[str, object]:
        """Return a JSON-ready dict keyed by app field names."""
        return self.model_dump(by_alias=True, mode="json", **kwargs)
