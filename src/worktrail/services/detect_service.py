"""Presence detection: run configured shell probes and record the hits."""
from __future__ import annotations
import logging
import subprocess
from collections.abc import Mapping
from worktrail.services.events_service import EventsService

logger = logging.getLogger(__name__)


def probe_succeeds(command: str) -> bool:
    """A probe detects presence when its command exits with status 0."""
    completed = subprocess.run(["sh", "-c", command], capture_output=True, check=False)
    return completed.returncode == 0


def detect_present(probes: Mapping[str, str]) -> list[str]:
    detected = []
    for name, command in probes.items():
        logger.debug("Running probe %s: %s", name, command)
        if probe_succeeds(command):
            detected.append(name)
        else:
            logger.debug("%s was not detected", name)
    return detected


class DetectService:
    def __init__(self, events: EventsService) -> None:
        self._events = events

    def detect(self, probes: Mapping[str, str]) -> list[str]:
        """Record an event at the current time for every probe that succeeds."""
        detected = detect_present(probes)
        for name in detected:
            self._events.add_event(name)
        return detected
