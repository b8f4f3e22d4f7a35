from __future__ import annotations

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake-case attributes, camelCase JSON (matches the stored documents)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_document(self, *, exclude_unset: bool = False) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_unset=exclude_unset)


class UpdateModel(CamelModel):
    """Partial update payload. Fields left out or sent as null are not changed."""

    def changes(self) -> dict:
        return {k: v for k, v in self.to_document(exclude_unset=True).items() if v is not None}
