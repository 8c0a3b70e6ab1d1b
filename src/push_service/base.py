from abc import ABC, abstractmethod


class PushServiceBase(ABC):
    @abstractmethod
    async def send(
        self,
        user_id: str,
        title: str,
        body: str,
        data: dict[str, str] | None = None,
    ) -> None:
        """Deliver a push message to every device registered for ``user_id``."""
        pass
