from dataclasses import dataclass, field
from pathlib import Path
import yaml


@dataclass
class GazeConfig:
    min_confidence: float = 0.3
    max_roll_deg: int = 31
    max_yaw_deg: int = 46
    high_offset_pct: float = 10.0
    pupil_offset_pct: float = 15.0


@dataclass
class AlertConfig:
    flash_interval: float = 0.5
    preview_duration: float = 3.0
    resume_grace: float = 3.0
    tick_hz: int = 20
    flashing_enabled: bool = False


@dataclass
class CameraConfig:
    index: int = 0
    width: int = 640
    height: int = 480
    mirror: bool = True


@dataclass
class DetectorConfig:
    model_path: str = "face_landmarker.task"
    max_faces: int = 4
    min_detection_confidence: float = 0.5
    min_presence_confidence: float = 0.5


@dataclass
class ControlConfig:
    enabled: bool = True
    host: str = "127.0.0.1"
    port: int = 8765


@dataclass
class Config:
    gaze: GazeConfig = field(default_factory=GazeConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    camera: CameraConfig = field(default_factory=CameraConfig)
    detector: DetectorConfig = field(default_factory=DetectorConfig)
    control: ControlConfig = field(default_factory=ControlConfig)
    log_level: str = "INFO"


def load_config(path: str = "config.yaml") -> Config:
    """Load config from YAML file, falling back to defaults for missing keys."""
    config = Config()
    config_path = Path(path)

    if not config_path.exists():
        return config

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    if "gaze" in data:
        g = data["gaze"]
        config.gaze = GazeConfig(
            min_confidence=g.get("min_confidence", config.gaze.min_confidence),
            max_roll_deg=g.get("max_roll_deg", config.gaze.max_roll_deg),
            max_yaw_deg=g.get("max_yaw_deg", config.gaze.max_yaw_deg),
            high_offset_pct=g.get("high_offset_pct", config.gaze.high_offset_pct),
            pupil_offset_pct=g.get("pupil_offset_pct", config.gaze.pupil_offset_pct),
        )

    if "alerts" in data:
        a = data["alerts"]
        config.alerts = AlertConfig(
            flash_interval=a.get("flash_interval", config.alerts.flash_interval),
            preview_duration=a.get("preview_duration", config.alerts.preview_duration),
            resume_grace=a.get("resume_grace", config.alerts.resume_grace),
            tick_hz=a.get("tick_hz", config.alerts.tick_hz),
            flashing_enabled=a.get("flashing_enabled", config.alerts.flashing_enabled),
        )

    if "camera" in data:
        c = data["camera"]
        config.camera = CameraConfig(
            index=c.get("index", config.camera.index),
            width=c.get("width", config.camera.width),
            height=c.get("height", config.camera.height),
            mirror=c.get("mirror", config.camera.mirror),
        )

    if "detector" in data:
        d = data["detector"]
        config.detector = DetectorConfig(
            model_path=d.get("model_path", config.detector.model_path),
            max_faces=d.get("max_faces", config.detector.max_faces),
            min_detection_confidence=d.get(
                "min_detection_confidence", config.detector.min_detection_confidence),
            min_presence_confidence=d.get(
                "min_presence_confidence", config.detector.min_presence_confidence),
        )

    if "control" in data:
        c = data["control"]
        config.control = ControlConfig(
            enabled=c.get("enabled", config.control.enabled),
            host=c.get("host", config.control.host),
            port=c.get("port", config.control.port),
        )

    if "logging" in data:
        config.log_level = data["logging"].get("level", config.log_level)

    return config
