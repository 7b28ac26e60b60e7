"""Shared schema base — camelCase on the wire, snake_case in Python."""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Accepts both ``rootPath`` and ``root_path``; serializes as camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
