"""Voice output for assistant messages."""
import shutil
import subprocess
from abc import ABC, abstractmethod
from typing import List, Optional

from newsdesk.core import config
from newsdesk.core.logging import logger


class VoiceOutput(ABC):
    """Fire-and-forget text-to-speech collaborator."""

    @abstractmethod
    def speak(self, text: str) -> None:
        """Start speaking ``text`` without waiting for playback to finish."""
        pass


class CommandVoice(VoiceOutput):
    """Speaks through a system TTS command such as ``espeak`` or ``say``."""

    def __init__(self, command: Optional[str] = None):
        self.command = command or config.settings.assistant.voice_command
        self._processes: List[subprocess.Popen] = []

    def is_available(self) -> bool:
        return shutil.which(self.command) is not None

    def speak(self, text: str) -> None:
        if not text.strip():
            return
        self.reap()
        try:
            process = subprocess.Popen(
                [self.command, text],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning(f"[Voice] Could not run '{self.command}': {e}")
            return
        self._processes.append(process)

    def reap(self) -> int:
        """Collect finished speech processes; returns how many are still running."""
        self._processes = [p for p in self._processes if p.poll() is None]
        return len(self._processes)
