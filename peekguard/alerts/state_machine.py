"""Alert signaling state machine.

Turns the noisy peeping count into a stable, user-visible alarm:

    OFF ──(count > 0)──> STEADY                 (flashing disabled)
     ^                   FLASHING_ON <-> FLASHING_OFF  (every flash_interval)
     |                        |
     +───(count == 0)─────────+
    any ─(toggle tracking off)─> PAUSED ─(toggle on, resume_grace)─> re-evaluate
    any ─(camera rejected)─> CAMERA_DISABLED (terminal)

Runs on a single thread: handle() for events, Scheduler.run_due() for timer
ticks, never both at once. It never raises.
"""

import logging
import math
from dataclasses import dataclass
from enum import Enum

from peekguard.alerts.events import (
    CameraAccessRejected,
    PeepingCountChanged,
    Preview,
    Quit,
    ToggleFlashingMode,
    ToggleTracking,
)
from peekguard.alerts.scheduler import Scheduler
from peekguard.config import AlertConfig

log = logging.getLogger("peekguard")


class AlertState(Enum):
    OFF = "off"
    STEADY = "steady"
    FLASHING_ON = "flashing_on"
    FLASHING_OFF = "flashing_off"
    PAUSED = "paused"
    CAMERA_DISABLED = "camera_disabled"


FLASHING_STATES = (AlertState.FLASHING_ON, AlertState.FLASHING_OFF)


@dataclass
class AlertSettings:
    """User-facing flags. Only the state machine mutates these."""

    flashing_enabled: bool = False
    tracking_enabled: bool = True
    previewing: bool = False
    camera_disabled: bool = False


class AlertStateMachine:
    def __init__(self, config: AlertConfig | None = None,
                 scheduler: Scheduler | None = None):
        self._cfg = config or AlertConfig()
        self._scheduler = scheduler or Scheduler()

        self._state = AlertState.OFF
        self._count = 0
        self._disabled_reason = ""
        self._settings = AlertSettings(flashing_enabled=self._cfg.flashing_enabled)

        # Outstanding timers (None when not scheduled)
        self._flash_timer = None
        self._preview_timer = None
        self._resume_timer = None

        self._state_listeners = []
        self._camera_disabled_listeners = []
        self._capture_listeners = []
        self._quit_listeners = []

        self._handlers = {
            PeepingCountChanged: self._on_count_changed,
            ToggleFlashingMode: self._on_toggle_flashing,
            ToggleTracking: self._on_toggle_tracking,
            Preview: self._on_preview,
            CameraAccessRejected: self._on_camera_rejected,
            Quit: self._on_quit,
        }

    # --- Read-only views ---

    @property
    def state(self) -> AlertState:
        return self._state

    @property
    def count(self) -> int:
        return self._count

    @property
    def settings(self) -> AlertSettings:
        return AlertSettings(**vars(self._settings))

    @property
    def can_preview(self) -> bool:
        return self._count == 0 and not self._settings.camera_disabled

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    def snapshot(self) -> dict:
        """Status for the control panel."""
        return {
            "state": self._state.value,
            "count": self._count,
            "flashing_enabled": self._settings.flashing_enabled,
            "tracking_enabled": self._settings.tracking_enabled,
            "previewing": self._settings.previewing,
            "camera_disabled": self._settings.camera_disabled,
            "disabled_reason": self._disabled_reason,
            "can_preview": self.can_preview,
        }

    # --- Listeners ---

    def on_state_change(self, callback):
        self._state_listeners.append(callback)

    def on_camera_disabled(self, callback):
        self._camera_disabled_listeners.append(callback)

    def on_capture(self, callback):
        """callback(enabled: bool) when capture should pause or resume."""
        self._capture_listeners.append(callback)

    def on_quit(self, callback):
        self._quit_listeners.append(callback)

    # --- Inputs ---

    def handle(self, event):
        if self._settings.camera_disabled and not isinstance(event, Quit):
            log.debug(f"Ignoring {type(event).__name__}: camera disabled")
            return

        handler = self._handlers.get(type(event))
        if handler is None:
            log.warning(f"Unknown alert event: {event!r}")
            return
        handler(event)

    def _on_count_changed(self, event: PeepingCountChanged):
        self._count = max(0, event.count)

        # Paused, waiting out the resume grace, or previewing: remember the
        # count and let the pending transition pick it up
        if (not self._settings.tracking_enabled or self._resume_timer is not None
                or self._settings.previewing):
            return

        self._evaluate()

    def _on_toggle_flashing(self, event):
        s = self._settings
        s.flashing_enabled = not s.flashing_enabled
        log.info(f"Alert flashing {'enabled' if s.flashing_enabled else 'disabled'}")

        if not s.tracking_enabled or self._resume_timer is not None:
            return
        if self._count > 0:
            # Also when disabling: a fresh FLASHING_ON half-cycle, settling to
            # STEADY at its first boundary
            self._start_flashing()

    def _on_toggle_tracking(self, event):
        s = self._settings
        s.tracking_enabled = not s.tracking_enabled

        if not s.tracking_enabled:
            log.info("Monitoring paused")
            self._cancel_flashing()
            self._resume_timer = _cancel(self._resume_timer)
            self._preview_timer = _cancel(self._preview_timer)
            s.previewing = False
            self._set_state(AlertState.PAUSED)
            self._notify(self._capture_listeners, False)
        else:
            log.info(f"Monitoring resumed, re-evaluating in {self._cfg.resume_grace}s")
            self._notify(self._capture_listeners, True)
            self._resume_timer = _cancel(self._resume_timer)
            self._resume_timer = self._scheduler.call_later(
                self._cfg.resume_grace, self._on_resume_grace)

    def _on_preview(self, event):
        s = self._settings
        s.previewing = True
        log.info(f"Previewing alert for {self._cfg.preview_duration}s")

        if s.flashing_enabled:
            self._start_flashing()
        else:
            self._cancel_flashing()
            self._set_state(AlertState.STEADY)

        self._preview_timer = _cancel(self._preview_timer)
        self._preview_timer = self._scheduler.call_later(
            self._cfg.preview_duration, self._on_preview_end)

    def _on_camera_rejected(self, event: CameraAccessRejected):
        log.warning(f"Camera access rejected{': ' + event.reason if event.reason else ''}")
        self._cancel_timers()
        self._settings.camera_disabled = True
        self._disabled_reason = event.reason
        self._settings.previewing = False
        self._set_state(AlertState.CAMERA_DISABLED)
        self._notify(self._camera_disabled_listeners)

    def _on_quit(self, event):
        log.info("Quit requested")
        self._cancel_timers()
        self._notify(self._quit_listeners)

    # --- Timer callbacks ---

    def _on_flash_tick(self):
        deadline = self._flash_timer.deadline
        self._flash_timer = None
        if self._should_stop_flashing():
            self._set_state(self._resting_state())
            return

        if self._state == AlertState.FLASHING_ON:
            self._set_state(AlertState.FLASHING_OFF)
        else:
            self._set_state(AlertState.FLASHING_ON)
        self._flash_timer = self._scheduler.call_at(
            self._next_boundary(deadline), self._on_flash_tick)

    def _on_preview_end(self):
        self._preview_timer = None
        self._settings.previewing = False

        if self._state in FLASHING_STATES and not self._should_stop_flashing():
            return
        if self._resume_timer is not None:
            return
        self._settle(self._resting_state())

    def _on_resume_grace(self):
        self._resume_timer = None
        if self._settings.previewing:
            return
        self._evaluate()

    # --- Transitions ---

    def _evaluate(self):
        """Show whatever the last known count calls for."""
        if self._count > 0 and self._settings.flashing_enabled:
            self._start_flashing()
        else:
            self._settle(self._resting_state())

    def _resting_state(self) -> AlertState:
        s = self._settings
        if s.camera_disabled:
            return AlertState.CAMERA_DISABLED
        if not s.tracking_enabled:
            return AlertState.PAUSED
        return AlertState.STEADY if self._count > 0 else AlertState.OFF

    def _should_stop_flashing(self) -> bool:
        s = self._settings
        if s.previewing:
            return False
        return self._count == 0 or not s.flashing_enabled or not s.tracking_enabled

    def _next_boundary(self, deadline: float) -> float:
        """Boundary after the one due at deadline, skipping any already missed."""
        interval = self._cfg.flash_interval
        boundary = deadline + interval
        now = self._scheduler.now()
        if boundary <= now:
            boundary += math.floor((now - boundary) / interval + 1) * interval
        return boundary

    def _start_flashing(self):
        self._cancel_flashing()
        self._set_state(AlertState.FLASHING_ON)
        self._flash_timer = self._scheduler.call_later(
            self._cfg.flash_interval, self._on_flash_tick)

    def _cancel_flashing(self):
        self._flash_timer = _cancel(self._flash_timer)

    def _settle(self, state: AlertState):
        self._cancel_flashing()
        self._set_state(state)

    def _cancel_timers(self):
        # Terminal transitions only; drops everything still scheduled
        self._flash_timer = self._preview_timer = self._resume_timer = None
        self._scheduler.cancel_all()

    def _set_state(self, state: AlertState):
        if state == self._state:
            return
        if self._state in FLASHING_STATES and state in FLASHING_STATES:
            log.debug(f"Alert: {self._state.value} -> {state.value}")
        else:
            log.info(f"Alert: {self._state.value} -> {state.value}")
        self._state = state
        self._notify(self._state_listeners, state)

    def _notify(self, listeners, *args):
        for callback in listeners:
            try:
                callback(*args)
            except Exception as e:
                log.error(f"Alert listener failed: {e}", exc_info=True)


def _cancel(handle):
    if handle is not None:
        handle.cancel()
    return None
