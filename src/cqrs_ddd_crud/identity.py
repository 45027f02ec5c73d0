import datetime
import uuid
from typing import Protocol


class IIDGenerator(Protocol):
    """
    Protocol for identity generation.
    Used for both logical entity ids and physical row ids.
    """

    def next_id(self) -> str:
        """Generates the next unique identifier."""
        ...


class UUID4Generator(IIDGenerator):
    """Default generator: random UUIDv4 strings."""

    def next_id(self) -> str:
        return str(uuid.uuid4())


def utc_now() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)
