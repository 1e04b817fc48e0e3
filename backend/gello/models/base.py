"""Common base for row models returned by the data service."""

from pydantic import BaseModel, ConfigDict


class RowModel(BaseModel):
    """Base class for table rows.

    Rows arrive as plain dicts from PostgREST; unknown columns are ignored so
    schema additions on the database side never break reads.
    """

    model_config = ConfigDict(extra="ignore", from_attributes=True)
