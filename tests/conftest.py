"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import numpy as np
import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
source:
  tolerance: 0.1

detection:
  backend: "yolo"
  yolo:
    model: "yolov8n.pt"
    conf_threshold: 0.25

heatmap:
  grid_size: 20
  sample_interval: 10.0
  max_samples: 20

region:
  threshold: 0.4

export:
  frame_interval: 0.5
  mode: "overlay"

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "source": {"tolerance": 0.1},
        "detection": {
            "backend": "yolo",
            "yolo": {
                "model": "yolov8n.pt",
                "conf_threshold": 0.25,
                "iou_threshold": 0.45,
                "classes": [0],
            },
        },
        "heatmap": {
            "grid_size": 20,
            "sample_interval": 10.0,
            "max_samples": 20,
        },
        "region": {
            "threshold": 0.4,
            "band_min": 0.05,
            "band_max": 0.70,
            "h_pad": 0.03,
            "v_pad": 0.08,
        },
        "export": {
            "frame_interval": 0.5,
            "backpressure_delay": 0.01,
            "progress_interval": 10,
            "codec": "avc1",
            "fallback_codec": "mp4v",
            "queue_size": 8,
            "mode": "overlay",
            "zoom_factor": 2.0,
            "smoothing": 0.2,
            "output_dir": "output/video",
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }


@pytest.fixture
def blank_frame():
    """A 640x480 black BGR frame."""
    return np.zeros((480, 640, 3), dtype=np.uint8)
