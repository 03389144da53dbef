from __future__ import annotations

import logging
import wave
from pathlib import Path
from threading import Event, Lock, Thread
from typing import Optional

import numpy as np

from .gateway import NotificationRequest

try:
    import winsound
except ImportError:  # pragma: no cover - non-Windows fallback
    winsound = None  # type: ignore

try:
    import pyaudio
except ImportError:  # pragma: no cover - optional audio output
    pyaudio = None  # type: ignore

try:  # Optional local TTS for reading the alarm label aloud
    import pyttsx3
except ImportError:  # pragma: no cover - optional
    pyttsx3 = None  # type: ignore

logger = logging.getLogger(__name__)

SAMPLE_RATE = 24000


def render_tone(duration_seconds: float = 1.5, freq: float = 880.0, amplitude: float = 0.4) -> np.ndarray:
    """Beeping sine tone as int16 samples: 250 ms on, 250 ms off."""
    t = np.arange(int(duration_seconds * SAMPLE_RATE)) / SAMPLE_RATE
    tone = amplitude * np.sin(2 * np.pi * freq * t)
    gate = (np.floor(t / 0.25) % 2 == 0).astype(np.float64)
    return (tone * gate * 32767).astype(np.int16)


def ensure_alarm_sound(path: Path, duration_seconds: float = 1.5) -> None:
    if path.exists():
        return
    path.parent.mkdir(parents=True, exist_ok=True)
    samples = render_tone(duration_seconds)
    with wave.open(str(path), "wb") as wav:
        wav.setnchannels(1)
        wav.setsampwidth(2)
        wav.setframerate(SAMPLE_RATE)
        wav.writeframes(samples.tobytes())
    logger.info("Generated default alarm sound at %s", path)


class AlarmSoundPlayer:
    def __init__(self, sound_path: Path):
        self.sound_path = sound_path
        self._stop_event = Event()
        self._loop_thread: Optional[Thread] = None
        self._winsound_active = False

    @property
    def is_playing(self) -> bool:
        if self._winsound_active:
            return True
        if self._loop_thread and self._loop_thread.is_alive():
            return not self._stop_event.is_set()
        return False

    def start_loop(self) -> None:
        ensure_alarm_sound(self.sound_path)
        self._stop_event.clear()
        if winsound:
            try:
                winsound.PlaySound(
                    str(self.sound_path),
                    winsound.SND_FILENAME | winsound.SND_LOOP | winsound.SND_ASYNC,
                )
                self._winsound_active = True
                return
            except RuntimeError:
                logger.warning("winsound.PlaySound failed, falling back to output stream")

        if self._loop_thread and self._loop_thread.is_alive():
            return
        self._loop_thread = Thread(target=self._play_loop, name="alarm-sound", daemon=True)
        self._loop_thread.start()

    def stop_loop(self) -> None:
        self._stop_event.set()
        self._winsound_active = False
        if winsound:
            try:
                winsound.PlaySound(None, winsound.SND_PURGE)
            except RuntimeError:
                logger.debug("winsound.PlaySound purge failed")

    def _play_loop(self) -> None:  # pragma: no cover - audio device loop
        if pyaudio is None:
            self._log_loop()
            return
        with wave.open(str(self.sound_path), "rb") as wav:
            rate = wav.getframerate()
            frames = wav.readframes(wav.getnframes())
        pa = pyaudio.PyAudio()
        try:
            stream = pa.open(format=pyaudio.paInt16, channels=1, rate=rate, output=True)
        except OSError as exc:
            logger.warning("Audio output unavailable (%s), falling back to log", exc)
            pa.terminate()
            self._log_loop()
            return
        try:
            while not self._stop_event.is_set():
                stream.write(frames)
        finally:
            stream.stop_stream()
            stream.close()
            pa.terminate()

    def _log_loop(self) -> None:  # pragma: no cover - timing loop
        while not self._stop_event.is_set():
            logger.info("Alarm ringing...")
            self._stop_event.wait(0.75)


class LocalSpeaker:
    """Offline TTS wrapper reading the notification title and body aloud."""

    def __init__(self, rate: int = 185, enabled: bool = True):
        self._engine = None
        self._lock = Lock()
        if pyttsx3 and enabled:
            try:
                self._engine = pyttsx3.init()
            except Exception as exc:  # pragma: no cover - missing TTS backend
                logger.warning("pyttsx3 engine unavailable: %s", exc)
        if self._engine:
            try:
                self._engine.setProperty("rate", rate)
            except Exception:
                logger.debug("Failed to set pyttsx3 rate")

    @property
    def available(self) -> bool:
        return self._engine is not None

    def announce_async(self, request: NotificationRequest) -> bool:
        return self.speak_async(f"{request.title}. {request.body}")

    def speak_async(self, text: str) -> bool:
        if not self._engine:
            return False
        Thread(target=self._speak, args=(text,), daemon=True).start()
        return True

    def _speak(self, text: str) -> None:
        if not self._engine:
            return
        with self._lock:
            try:
                self._engine.say(text)
                self._engine.runAndWait()
            except Exception:  # pragma: no cover - engine runtime errors
                logger.error("pyttsx3 failed to speak text", exc_info=True)
