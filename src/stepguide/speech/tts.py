# tts.py
# Speech-output sink for navigation instructions.
# One SpeechOutput is created by the application and handed to whoever
# needs to talk; there is no module-level engine.

import logging
import queue
import threading
from typing import Any, Callable, Optional

import pyttsx3

from ..guidance.nav_config import NavConfig

logger = logging.getLogger(__name__)


class SpeechOutput:
    """
    Queued text-to-speech with de-duplication of repeated announcements.

    speak() only enqueues; a daemon worker owns the pyttsx3 engine, so a GPS
    tick never waits for audio. A new announcement supersedes any that have
    not been played yet.

    Usage:
        speech = SpeechOutput(config)
        speech.speak("Turn left in approximately 12 steps")
        ...
        speech.close()

    Args:
        config:         NavConfig with rate / volume / pitch / voice settings.
        engine_factory: Callable returning a pyttsx3-compatible engine;
                        defaults to pyttsx3.init.
    """

    def __init__(
        self,
        config: Optional[NavConfig] = None,
        engine_factory: Optional[Callable[[], Any]] = None,
    ) -> None:
        self.config = config or NavConfig()
        self._engine_factory = engine_factory or pyttsx3.init
        self._engine: Any = None
        self._queue: "queue.Queue[Optional[str]]" = queue.Queue()
        self._lock = threading.Lock()
        self._worker: Optional[threading.Thread] = None
        self._last_spoken = ""
        self._rate = self.config.speech_rate
        self._pitch = self.config.speech_pitch
        self._settings_dirty = True

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def last_spoken(self) -> str:
        return self._last_spoken

    def speak(self, text: str, force: bool = False) -> bool:
        """
        Announce text, replacing anything not yet played.

        Pending announcements are dropped and the sentence in progress is cut
        off, so the user always hears the newest instruction next.

        Args:
            text:  Sentence to announce.
            force: Speak even if it equals the previous announcement.

        Returns:
            True if the text was queued, False if it was empty or a repeat.
        """
        text = (text or "").strip()
        if not text:
            return False

        with self._lock:
            if not force and text == self._last_spoken:
                return False
            self._last_spoken = text
            self._ensure_worker()
            self._interrupt()
            self._queue.put(text)
        return True

    def stop(self) -> None:
        """Drop everything still queued and interrupt the current sentence."""
        with self._lock:
            self._interrupt()

    def reset(self) -> None:
        """Forget the last announcement so the next one is never treated as a repeat."""
        with self._lock:
            self._last_spoken = ""

    def set_rate(self, rate: int) -> None:
        self._rate = rate
        self._settings_dirty = True

    def set_pitch(self, pitch: float) -> None:
        self._pitch = pitch
        self._settings_dirty = True

    def wait_until_done(self) -> None:
        """Block until every queued announcement has been played."""
        self._queue.join()

    def close(self, timeout: float = 5.0) -> None:
        """Finish the queue and stop the worker thread."""
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is None:
            return
        self._queue.join()
        self._queue.put(None)
        worker.join(timeout=timeout)

    # ------------------------------------------------------------------
    # Worker
    # ------------------------------------------------------------------

    def _interrupt(self) -> None:
        # Caller holds self._lock
        dropped = 0
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
            self._queue.task_done()
            dropped += 1
        if dropped:
            logger.debug(f"Dropped {dropped} queued announcements")
        if self._engine is not None:
            self._engine.stop()

    def _ensure_worker(self) -> None:
        if self._worker is None or not self._worker.is_alive():
            self._worker = threading.Thread(target=self._run, name="speech-output", daemon=True)
            self._worker.start()

    def _init_engine(self) -> Any:
        engine = self._engine_factory()
        engine.setProperty("volume", self.config.speech_volume)

        preferred = [p.lower() for p in self.config.preferred_voices]
        for voice in engine.getProperty("voices") or []:
            name = (getattr(voice, "name", "") or "").lower()
            if any(p in name for p in preferred):
                engine.setProperty("voice", voice.id)
                logger.info(f"Using voice: {voice.name}")
                break
        return engine

    def _apply_settings(self) -> None:
        self._engine.setProperty("rate", self._rate)
        try:
            self._engine.setProperty("pitch", self._pitch)
        except (KeyError, ValueError, AttributeError):
            logger.debug("Speech driver has no pitch control")
        self._settings_dirty = False

    def _run(self) -> None:
        while True:
            text = self._queue.get()
            if text is None:
                self._queue.task_done()
                break
            try:
                if self._engine is None:
                    self._engine = self._init_engine()
                if self._settings_dirty:
                    self._apply_settings()
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception as e:
                logger.error(f"Speech output failed for {text!r}: {e}")
            finally:
                self._queue.task_done()
