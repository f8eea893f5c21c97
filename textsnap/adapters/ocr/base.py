from abc import ABC, abstractmethod
from typing import Optional


class OCRBackend(ABC):
    @abstractmethod
    def recognize_text(self, image_path: str, custom_prompt: Optional[str] = None) -> str:
        """Return trimmed text found in the image ("" means no text).

        Raises RecognitionError on every failure.
        """
        ...

    @abstractmethod
    def validate_config(self) -> bool:
        """Local syntactic check only: no network call, no subprocess. Never raises."""
        ...

    @abstractmethod
    def get_name(self) -> str:
        ...
