import logging
from dataclasses import dataclass, field
from typing import Optional, List

logger = logging.getLogger("textsnap")

MAX_LOG_LINES = 200


@dataclass
class StatusStore:
    last_backend: Optional[str] = None
    last_error: Optional[str] = None
    logs: List[str] = field(default_factory=list)

    def log(self, msg: str, level: int = logging.INFO):
        logger.log(level, msg)
        self.logs.append(msg)
        if len(self.logs) > MAX_LOG_LINES:
            self.logs = self.logs[-MAX_LOG_LINES:]
