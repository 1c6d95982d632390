from typing import Protocol, runtime_checkable

@runtime_checkable
class EventBusPort(Protocol):
    """Destination for outbox events once they are committed."""

    async def publish(self, topic: str, key: str, value: dict, headers: dict | None = None) -> None: ...

    async def close(self) -> None: ...
