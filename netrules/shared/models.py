"""
Base model for API-facing payloads.

Fields are declared in snake_case and serialized in camelCase; input is
accepted in either form.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )

    def to_api(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")
