from typing import Dict, List

from pydantic import BaseModel, ConfigDict, ValidationError
from pydantic.alias_generators import to_camel


class BaseSchema(BaseModel):
    """Base for every API schema: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )


def describe_validation_error(error: ValidationError) -> List[Dict[str, str]]:
    """JSON-safe summary of a pydantic ValidationError: one entry per bad field."""
    return [
        {"field": ".".join(str(part) for part in item["loc"]), "message": item["msg"]}
        for item in error.errors()
    ]
