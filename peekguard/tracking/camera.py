import cv2
import numpy as np


class CameraAccessError(RuntimeError):
    """The camera could not be opened (missing device or permission denied)."""


class Camera:
    """Wraps cv2.VideoCapture for the user-facing webcam."""

    def __init__(self, index: int = 0, width: int = 640, height: int = 480,
                 mirror: bool = True):
        self._index = index
        self._width = width
        self._height = height
        self._mirror = mirror
        self._cap = None

    @property
    def running(self) -> bool:
        return self._cap is not None

    def start(self):
        cap = cv2.VideoCapture(self._index)
        if not cap.isOpened():
            cap.release()
            raise CameraAccessError(f"Could not open camera {self._index}")
        cap.set(cv2.CAP_PROP_FRAME_WIDTH, self._width)
        cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self._height)
        self._cap = cap

    def capture_rgb(self) -> np.ndarray | None:
        """Capture one RGB frame, or None if the camera dropped it."""
        if self._cap is None:
            return None
        ok, frame = self._cap.read()
        if not ok:
            return None
        if self._mirror:
            frame = cv2.flip(frame, 1)
        return cv2.cvtColor(frame, cv2.COLOR_BGR2RGB)

    def stop(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None
