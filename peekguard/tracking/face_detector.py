import logging
import os
import urllib.request

import mediapipe as mp
import numpy as np
from mediapipe.tasks import python as mp_tasks
from mediapipe.tasks.python import vision

from peekguard.config import DetectorConfig
from peekguard.tracking.landmarks import observation_from_mesh

log = logging.getLogger("peekguard")

FACE_LANDMARKER_MODEL_URL = (
    "https://storage.googleapis.com/mediapipe-models/face_landmarker/"
    "face_landmarker/float16/1/face_landmarker.task"
)


def ensure_model(path: str) -> str:
    """Return path to face_landmarker.task, downloading if missing."""
    if not os.path.isfile(path):
        log.info(f"Downloading face landmarker model to {path}")
        try:
            urllib.request.urlretrieve(FACE_LANDMARKER_MODEL_URL, path)
        except OSError as e:
            raise FileNotFoundError(
                f"Could not download face_landmarker.task. "
                f"Download manually from {FACE_LANDMARKER_MODEL_URL} to {path}"
            ) from e
    return path


class FaceMeshDetector:
    """MediaPipe Face Landmarker producing FaceObservations per frame."""

    def __init__(self, config: DetectorConfig):
        model_path = ensure_model(config.model_path)
        options = vision.FaceLandmarkerOptions(
            base_options=mp_tasks.BaseOptions(model_asset_path=model_path),
            running_mode=vision.RunningMode.VIDEO,
            num_faces=config.max_faces,
            min_face_detection_confidence=config.min_detection_confidence,
            min_face_presence_confidence=config.min_presence_confidence,
            output_facial_transformation_matrixes=True,
        )
        self._landmarker = vision.FaceLandmarker.create_from_options(options)
        self._last_timestamp_ms = -1

    def detect(self, rgb_frame: np.ndarray, timestamp_ms: int) -> list:
        """Detect faces in an RGB frame. Returns a list of FaceObservation."""
        # VIDEO mode rejects non-increasing timestamps
        timestamp_ms = max(timestamp_ms, self._last_timestamp_ms + 1)
        self._last_timestamp_ms = timestamp_ms

        image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_frame)
        result = self._landmarker.detect_for_video(image, timestamp_ms)

        matrices = result.facial_transformation_matrixes or []
        faces = []
        for i, landmarks in enumerate(result.face_landmarks):
            matrix = matrices[i] if i < len(matrices) else None
            # The landmarker has no per-face score; it only returns faces
            # above min_face_presence_confidence
            faces.append(observation_from_mesh(landmarks, matrix, confidence=1.0))
        return faces

    def close(self):
        self._landmarker.close()
