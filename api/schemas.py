"""Pydantic schemas shared across Agency Timesheets API routers."""
from pydantic import BaseModel
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    """Base for request/response bodies.

    JSON keys are camelCase like the stored records; snake_case is accepted
    on input as well.
    """

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True
