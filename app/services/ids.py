from typing import Optional, Union
from uuid import UUID

from app.exceptions import InvalidArgument


def parse_id(value: Optional[Union[str, UUID]], name: str = "id") -> UUID:
    """Validate a required entity id before any store access."""
    if isinstance(value, UUID):
        return value
    if value is None or not str(value).strip():
        raise InvalidArgument(f"{name} is required")
    try:
        return UUID(str(value).strip())
    except ValueError:
        raise InvalidArgument(f"{name} is not a valid id")
