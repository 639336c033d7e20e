"""
Typed configuration models matching the YAML config structure.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class SourceConfig:
    """Frame source configuration."""
    tolerance: float = 0.1

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "SourceConfig":
        """Adapter: Create from config dictionary."""
        return cls(tolerance=d.get("tolerance", 0.1))

    def to_dict(self) -> Dict[str, Any]:
        return {"tolerance": self.tolerance}


@dataclass
class YoloConfig:
    """YOLO detector configuration."""
    model: str = "yolov8n.pt"
    conf_threshold: float = 0.25
    iou_threshold: float = 0.45
    classes: Optional[List[int]] = field(default_factory=lambda: [0])

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "YoloConfig":
        return cls(
            model=d.get("model", "yolov8n.pt"),
            conf_threshold=d.get("conf_threshold", 0.25),
            iou_threshold=d.get("iou_threshold", 0.45),
            classes=d.get("classes", [0]),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "model": self.model,
            "conf_threshold": self.conf_threshold,
            "iou_threshold": self.iou_threshold,
        }
        if self.classes is not None:
            d["classes"] = self.classes
        return d


@dataclass
class DetectionConfig:
    """Detection configuration."""
    backend: str = "yolo"
    yolo: YoloConfig = field(default_factory=YoloConfig)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "DetectionConfig":
        return cls(
            backend=d.get("backend", "yolo"),
            yolo=YoloConfig.from_dict(d.get("yolo") or {}),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"backend": self.backend, "yolo": self.yolo.to_dict()}


@dataclass
class HeatmapConfig:
    """Pass-1 sampling and activity grid configuration."""
    grid_size: int = 20
    sample_interval: float = 10.0
    max_samples: int = 20

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HeatmapConfig":
        return cls(
            grid_size=d.get("grid_size", 20),
            sample_interval=d.get("sample_interval", 10.0),
            max_samples=d.get("max_samples", 20),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid_size": self.grid_size,
            "sample_interval": self.sample_interval,
            "max_samples": self.max_samples,
        }


@dataclass
class RegionConfig:
    """
    Region estimation configuration.

    Attributes:
        threshold: Fraction of the hottest cell a cell must beat.
        band_min: Fraction of rows skipped at the bottom of the frame.
        band_max: Fraction of rows (from the bottom) where the search stops.
        h_pad: Horizontal padding added on each side.
        v_pad: Vertical padding added on each side.
    """
    threshold: float = 0.40
    band_min: float = 0.05
    band_max: float = 0.70
    h_pad: float = 0.03
    v_pad: float = 0.08

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "RegionConfig":
        return cls(
            threshold=d.get("threshold", 0.40),
            band_min=d.get("band_min", 0.05),
            band_max=d.get("band_max", 0.70),
            h_pad=d.get("h_pad", 0.03),
            v_pad=d.get("v_pad", 0.08),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "threshold": self.threshold,
            "band_min": self.band_min,
            "band_max": self.band_max,
            "h_pad": self.h_pad,
            "v_pad": self.v_pad,
        }


@dataclass
class ExportConfig:
    """Pass-2 streaming and encoding configuration."""
    frame_interval: float = 0.5
    backpressure_delay: float = 0.01
    progress_interval: int = 10
    codec: str = "avc1"
    fallback_codec: str = "mp4v"
    queue_size: int = 8
    mode: str = "overlay"  # "overlay" | "zoom" | "zoom_preview"
    zoom_factor: float = 2.0
    smoothing: float = 0.2
    output_dir: str = "output/video"

    @property
    def output_fps(self) -> float:
        return 1.0 / self.frame_interval

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExportConfig":
        return cls(
            frame_interval=d.get("frame_interval", 0.5),
            backpressure_delay=d.get("backpressure_delay", 0.01),
            progress_interval=d.get("progress_interval", 10),
            codec=d.get("codec", "avc1"),
            fallback_codec=d.get("fallback_codec", "mp4v"),
            queue_size=d.get("queue_size", 8),
            mode=d.get("mode", "overlay"),
            zoom_factor=d.get("zoom_factor", 2.0),
            smoothing=d.get("smoothing", 0.2),
            output_dir=d.get("output_dir", "output/video"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frame_interval": self.frame_interval,
            "backpressure_delay": self.backpressure_delay,
            "progress_interval": self.progress_interval,
            "codec": self.codec,
            "fallback_codec": self.fallback_codec,
            "queue_size": self.queue_size,
            "mode": self.mode,
            "zoom_factor": self.zoom_factor,
            "smoothing": self.smoothing,
            "output_dir": self.output_dir,
        }


@dataclass
class Config:
    """
    Complete application configuration.

    This is a typed representation of the YAML config structure.
    """
    source: SourceConfig = field(default_factory=SourceConfig)
    detection: DetectionConfig = field(default_factory=DetectionConfig)
    heatmap: HeatmapConfig = field(default_factory=HeatmapConfig)
    region: RegionConfig = field(default_factory=RegionConfig)
    export: ExportConfig = field(default_factory=ExportConfig)
    log_path: str = "logs/region_export.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Adapter: Create Config from raw dictionary (e.g., from load_config)."""
        return cls(
            source=SourceConfig.from_dict(d.get("source") or {}),
            detection=DetectionConfig.from_dict(d.get("detection") or {}),
            heatmap=HeatmapConfig.from_dict(d.get("heatmap") or {}),
            region=RegionConfig.from_dict(d.get("region") or {}),
            export=ExportConfig.from_dict(d.get("export") or {}),
            log_path=d.get("log_path", "logs/region_export.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert back to dictionary (for saving or passing to the loaders)."""
        return {
            "source": self.source.to_dict(),
            "detection": self.detection.to_dict(),
            "heatmap": self.heatmap.to_dict(),
            "region": self.region.to_dict(),
            "export": self.export.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
