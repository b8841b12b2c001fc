from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase on the wire (frontend contract)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
