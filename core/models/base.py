from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """camelCase on the wire for existing JSON clients; snake_case accepted too."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
