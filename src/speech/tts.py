# tts.py
# Speaks announcement text through pyttsx3 on a background worker thread.
# say() never blocks the GPS loop; delivery is fire-and-forget.

import logging
import queue
import threading
from typing import Optional

import pyttsx3

logger = logging.getLogger(__name__)


class Speaker:
    """
    Queue-backed text-to-speech sink.

    Usage:
        speaker = Speaker(rate=150)
        speaker.start()
        session = NavigationSession(route, on_announcement=speaker.say)
        ...
        speaker.stop()

    Args:
        rate:   Words per minute passed to pyttsx3.
        volume: 0.0 – 1.0.
        voice:  Optional substring of a preferred voice name.
    """

    def __init__(self, rate: int = 150, volume: float = 1.0, voice: Optional[str] = None) -> None:
        self.rate = rate
        self.volume = volume
        self.voice = voice
        self._queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        if self._thread and self._thread.is_alive():
            return
        self._thread = threading.Thread(target=self._worker, name="tts-worker", daemon=True)
        self._thread.start()

    def say(self, text: str) -> None:
        text = (text or "").strip()
        if text:
            self._queue.put(text)

    def stop(self, timeout: float = 5.0) -> None:
        """Finish queued speech, then shut the worker down."""
        if not self._thread:
            return
        self._queue.put(None)
        self._thread.join(timeout=timeout)
        self._thread = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _init_engine(self):
        engine = pyttsx3.init()
        engine.setProperty("rate", self.rate)
        engine.setProperty("volume", self.volume)
        if self.voice:
            for v in engine.getProperty("voices"):
                if self.voice.lower() in (v.name or "").lower():
                    engine.setProperty("voice", v.id)
                    break
        return engine

    def _worker(self) -> None:
        try:
            engine = self._init_engine()
        except (RuntimeError, OSError, ImportError) as e:
            logger.error(f"TTS unavailable: {e}")
            engine = None

        while True:
            text = self._queue.get()
            try:
                if text is None:
                    break
                if engine is None:
                    logger.info(f"[TTS muted] {text}")
                    continue
                engine.say(text)
                engine.runAndWait()
            except RuntimeError as e:
                logger.error(f"TTS error: {e}")
            finally:
                self._queue.task_done()
