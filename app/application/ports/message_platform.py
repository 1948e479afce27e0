from abc import ABC, abstractmethod


class MessagePlatformPort(ABC):
    @abstractmethod
    def send_text(self, recipient_id: str, text: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def send_image(self, recipient_id: str, image_url: str, caption: str = "") -> None:
        raise NotImplementedError
