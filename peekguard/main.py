#!/usr/bin/env python3
"""PeekGuard - Main entry point and orchestrator."""

import argparse
import logging
import queue
import signal
import threading
import time

from peekguard.alerts.events import CameraAccessRejected
from peekguard.alerts.scheduler import Scheduler
from peekguard.alerts.state_machine import AlertStateMachine
from peekguard.config import load_config
from peekguard.gaze.aggregator import PeepingAggregator
from peekguard.gaze.classifier import GazeClassifier
from peekguard.tracking.camera import Camera, CameraAccessError
from peekguard.tracking.frame_processor import FrameProcessor
from peekguard.ui.web_server import ControlState, start_control_server

log = logging.getLogger("peekguard")


class PeekGuard:
    def __init__(self, config_path: str = "config.yaml", control: bool = True,
                 flashing: bool | None = None):
        self.config = load_config(config_path)
        if flashing is not None:
            self.config.alerts.flashing_enabled = flashing
        self._control = control and self.config.control.enabled
        self._running = False

        # Single ordered channel into the alert thread (frames + UI commands)
        self._events = queue.Queue()

        # Set while capture should run; cleared by "pause monitoring"
        self._capture_enabled = threading.Event()
        self._capture_enabled.set()

        self._processor = FrameProcessor(
            PeepingAggregator(GazeClassifier(self.config.gaze)),
            on_change=self._events.put,
        )
        self._alerts = AlertStateMachine(self.config.alerts, Scheduler())
        self._alerts.on_capture(self._on_capture)
        self._alerts.on_quit(self.stop)

    def start(self):
        self._running = True

        # Set up logging
        logging.basicConfig(
            level=getattr(logging, self.config.log_level),
            format="%(asctime)s %(name)s %(levelname)s %(message)s",
        )

        control_state = ControlState(submit=self._events.put)
        server = None
        if self._control:
            cfg = self.config.control
            server = start_control_server(control_state, cfg.host, cfg.port)
            log.info(f"Control panel at http://{cfg.host}:{cfg.port}")

        # Start tracking thread
        tracking_thread = threading.Thread(target=self._tracking_loop, daemon=True)
        tracking_thread.start()
        log.info("Tracking thread started")

        tick_time = 1.0 / self.config.alerts.tick_hz
        scheduler = self._alerts.scheduler
        control_state.publish(self._alerts.snapshot())

        try:
            while self._running:
                now = time.monotonic()

                # Events first, then timers, all on this thread
                self._drain_events()
                scheduler.run_due()
                control_state.publish(self._alerts.snapshot())

                elapsed = time.monotonic() - now
                sleep_time = tick_time - elapsed
                if sleep_time > 0:
                    time.sleep(sleep_time)

        except KeyboardInterrupt:
            log.info("Interrupted")
        finally:
            self._running = False
            # Unblock the tracking thread if it is waiting on a pause
            self._capture_enabled.set()
            if server is not None:
                server.shutdown()
            tracking_thread.join(timeout=2)
            log.info("Done")

    def _drain_events(self):
        while True:
            try:
                event = self._events.get_nowait()
            except queue.Empty:
                return
            self._alerts.handle(event)

    def _on_capture(self, enabled: bool):
        if enabled:
            self._capture_enabled.set()
        else:
            self._capture_enabled.clear()

    def _tracking_loop(self):
        """Background thread: camera capture + face detection."""
        cfg = self.config.camera
        camera = Camera(index=cfg.index, width=cfg.width, height=cfg.height,
                        mirror=cfg.mirror)
        detector = None

        try:
            camera.start()
            log.info("Camera started")
            detector = self._create_detector()

            while self._running:
                if not self._capture_enabled.is_set():
                    camera.stop()
                    log.info("Camera paused")
                    self._capture_enabled.wait()
                    if not self._running:
                        break
                    camera.start()
                    log.info("Camera resumed")

                rgb = camera.capture_rgb()
                if rgb is None:
                    log.warning("Dropped camera frame")
                    time.sleep(0.05)
                    continue

                faces = detector.detect(rgb, int(time.monotonic() * 1000))
                self._processor.process(faces)

        except CameraAccessError as e:
            log.error(f"Camera unavailable: {e}")
            self._events.put(CameraAccessRejected(reason=str(e)))
        except Exception as e:
            log.error(f"Tracking thread error: {e}", exc_info=True)
            # No frames will arrive any more; leave the normal menu
            self._events.put(CameraAccessRejected(reason=f"tracking stopped: {e}"))
        finally:
            if detector is not None:
                detector.close()
            camera.stop()
            log.info("Camera stopped")

    def _create_detector(self):
        # Deferred so the control panel still runs when mediapipe is missing
        from peekguard.tracking.face_detector import FaceMeshDetector
        return FaceMeshDetector(self.config.detector)

    def stop(self):
        self._running = False


def main():
    parser = argparse.ArgumentParser(description="PeekGuard shoulder-surfing alert")
    parser.add_argument("--config", default="config.yaml", help="Config file path")
    parser.add_argument("--no-control", action="store_true",
                        help="Do not start the local control panel")
    parser.add_argument("--flashing", action="store_true", default=None,
                        help="Start with alert flashing enabled")
    args = parser.parse_args()

    guard = PeekGuard(config_path=args.config, control=not args.no_control,
                      flashing=args.flashing)

    # Handle SIGTERM gracefully
    signal.signal(signal.SIGTERM, lambda *_: guard.stop())

    guard.start()


if __name__ == "__main__":
    main()
