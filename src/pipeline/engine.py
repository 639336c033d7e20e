"""
Two-pass export engine.

Pass 1 samples the whole video sparsely, builds an activity grid from the
detections and freezes a tracking region. Pass 2 walks the requested clip at
the output frame interval, classifies every subject against that region,
renders the result and feeds an encoder that may push back.
"""

from __future__ import annotations

import logging
import os
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Tuple

import numpy as np

from algorithms.action import (
    ActionCenter,
    calculate_action_center,
    crop_around_action_center,
    crop_window,
    smooth_action_center,
)
from algorithms.classify import classify_detections
from algorithms.heatmap import ActivityGrid, build_activity_grid
from algorithms.region import estimate_tracking_region
from detection.base import Detector
from detection.factory import create_detector
from encoding.base import SinkError, VideoSink
from encoding.opencv_sink import OpenCVSinkConfig, OpenCVVideoSink
from models.config import Config
from models.frame import FrameData
from models.region import TrackingRegion
from models.video import VideoProperties
from observation.base import FrameSource, FrameSourceError
from observation.opencv_source import OpenCVFrameSource, OpenCVFrameSourceConfig
from ops.config import ConfigError, load_config, validate_config
from ops.logging import setup_logging
from rendering.overlay import OverlayRenderer
from .sampler import FrameSampler

EXPORT_MODES = ("overlay", "zoom", "zoom_preview")


class ExportState(Enum):
    INIT = "init"
    PASS1_SAMPLING = "pass1_sampling"
    PASS1_ESTIMATING = "pass1_estimating"
    PASS2_OPEN_SINK = "pass2_open_sink"
    PASS2_STREAMING = "pass2_streaming"
    FINALIZING = "finalizing"
    DONE = "done"
    FAILED = "failed"


class ExportError(RuntimeError):
    """Fatal export failure. `stage` is the state the run was in."""

    def __init__(self, message: str, stage: ExportState):
        super().__init__(f"[{stage.value}] {message}")
        self.stage = stage


@dataclass
class ExportResult:
    """Outcome of a completed export."""
    output_path: str
    frames_written: int
    frames_skipped: int
    region: TrackingRegion
    state: ExportState
    stopped: bool = False


@dataclass
class ExportStats:
    """Runtime statistics for one export run."""
    samples_used: int = 0
    frames_written: int = 0
    frames_skipped: int = 0
    backpressure_waits: int = 0
    start_time: float = 0.0


class ExportPipeline:
    """
    Orchestrates a full export.

    The pipeline owns none of its collaborators: the source, detector, sink
    and renderer are passed in, which keeps every stage replaceable in tests.

    Example:
        source = OpenCVFrameSource(OpenCVFrameSourceConfig(path="game.mp4"))
        sink = OpenCVVideoSink()
        pipeline = ExportPipeline(source, detector, sink, OverlayRenderer(), Config())
        result = pipeline.run("output/video/game_tracked.mp4", 0.0, 30.0)
    """

    def __init__(
        self,
        source: FrameSource,
        detector: Detector,
        sink: VideoSink,
        renderer: OverlayRenderer,
        config: Config,
    ):
        if config.export.mode not in EXPORT_MODES:
            raise ValueError(f"Unknown export mode: {config.export.mode}")
        if config.export.frame_interval <= 0:
            raise ValueError(f"frame_interval must be positive, got {config.export.frame_interval}")

        self.source = source
        self.detector = detector
        self.sink = sink
        self.renderer = renderer
        self.config = config
        self.state = ExportState.INIT
        self.stats = ExportStats()
        self.region: Optional[TrackingRegion] = None
        self.grid: Optional[ActivityGrid] = None
        self._running = False
        self._sink_opened = False
        self._center = ActionCenter()

    def stop(self) -> None:
        """Signal the export to stop after the current step."""
        self._running = False

    def run(
        self,
        output_path: str,
        start_time: float = 0.0,
        clip_duration: float = 30.0,
    ) -> ExportResult:
        """
        Run both passes and write the output video.

        Args:
            output_path: Destination file. An existing file is replaced.
            start_time: Clip start in media seconds.
            clip_duration: Clip length in seconds.

        Returns:
            ExportResult with the frozen region and frame counts.

        Raises:
            ExportError: On any fatal failure; the partial output is removed.
        """
        self._running = True
        self._sink_opened = False
        self._center = ActionCenter()
        self.stats = ExportStats(start_time=time.time())
        self.state = ExportState.INIT

        try:
            props, duration = self._open_source()

            self.state = ExportState.PASS1_SAMPLING
            self.grid = self._sample_activity()

            self.state = ExportState.PASS1_ESTIMATING
            self.region = estimate_tracking_region(self.grid, config=self.config.region)
            logging.info(
                f"Tracking region: x[{self.region.min_x:.2f}-{self.region.max_x:.2f}] "
                f"y[{self.region.min_y:.2f}-{self.region.max_y:.2f}]"
            )

            self.state = ExportState.PASS2_OPEN_SINK
            self._open_sink(output_path, props)

            self.state = ExportState.PASS2_STREAMING
            end_time = min(duration, start_time + clip_duration)
            self._stream(start_time, end_time)

            self.state = ExportState.FINALIZING
            self.sink.finish()
            self._sink_opened = False
        except ExportError as e:
            self._fail()
            logging.error(f"Export failed: {e}")
            raise
        except Exception as e:
            stage = self.state
            self._fail()
            logging.error(f"Export failed during {stage.value}: {e}")
            raise ExportError(str(e), stage) from e
        except BaseException:
            # KeyboardInterrupt and friends propagate as-is, minus the partial output
            self._fail()
            raise
        finally:
            self.source.close()

        self.state = ExportState.DONE
        elapsed = time.time() - self.stats.start_time
        logging.info(
            f"Export complete: {output_path} frames={self.stats.frames_written} "
            f"skipped={self.stats.frames_skipped} waits={self.stats.backpressure_waits} "
            f"elapsed={elapsed:.1f}s"
        )
        return ExportResult(
            output_path=output_path,
            frames_written=self.stats.frames_written,
            frames_skipped=self.stats.frames_skipped,
            region=self.region,
            state=self.state,
            stopped=not self._running,
        )

    def _open_source(self) -> Tuple[VideoProperties, float]:
        try:
            self.source.open()
            props = self.source.track_properties()
            duration = self.source.duration()
        except FrameSourceError as e:
            raise ExportError(str(e), ExportState.INIT) from e

        logging.info(
            f"Export source: {self.source.source_id} {props.width}x{props.height} "
            f"@ {props.fps:.2f}fps, duration={duration:.1f}s"
        )
        return props, duration

    def _sample_activity(self) -> ActivityGrid:
        heatmap_cfg = self.config.heatmap
        sampler = FrameSampler()
        frames = sampler.sample(self.source, heatmap_cfg.sample_interval, heatmap_cfg.max_samples)
        grid = build_activity_grid(frames, self.detector, heatmap_cfg.grid_size)
        self.stats.samples_used = sampler.stats.produced
        return grid

    def _output_size(self, props: VideoProperties) -> Tuple[int, int]:
        width, height = props.natural_size
        if self.config.export.mode == "zoom":
            zoom = self.config.export.zoom_factor
            return (int(width / zoom), int(height / zoom))
        return (width, height)

    def _open_sink(self, output_path: str, props: VideoProperties) -> None:
        if os.path.exists(output_path):
            os.remove(output_path)

        size = self._output_size(props)
        try:
            self.sink.open(output_path, size, self.config.export.output_fps)
        except SinkError as e:
            raise ExportError(str(e), ExportState.PASS2_OPEN_SINK) from e
        self._sink_opened = True

    def _stream(self, start_time: float, end_time: float) -> None:
        export_cfg = self.config.export
        index = 0
        while self._running:
            t = start_time + index * export_cfg.frame_interval
            if t >= end_time:
                break
            index += 1

            rendered = self._render_step(t)
            if rendered is None:
                self.stats.frames_skipped += 1
                continue

            buffer = self.sink.prepare(rendered)
            del rendered

            if not self._wait_for_sink():
                break

            self.sink.push(buffer, t)
            self.stats.frames_written += 1
            if self.stats.frames_written % export_cfg.progress_interval == 0:
                logging.info(
                    f"Export progress: {self.stats.frames_written} frames, "
                    f"t={t:.1f}s/{end_time:.1f}s"
                )

        if not self._running:
            logging.info(f"Export stopped after {self.stats.frames_written} frames")

    def _render_step(self, t: float) -> Optional[np.ndarray]:
        """Fetch, detect, classify and render one step. None means skip."""
        try:
            frame_data = self.source.frame_at(t)
        except FrameSourceError as e:
            logging.debug(f"Frame at {t:.2f}s skipped: {e}")
            return None

        try:
            detections = self.detector.detect(frame_data.frame)
        except Exception as e:
            logging.warning(f"Detection failed at {t:.2f}s, frame skipped: {e}")
            return None

        people = classify_detections(detections, self.region, frame=frame_data.frame)
        return self._compose(frame_data, people)

    def _compose(self, frame_data: FrameData, people) -> np.ndarray:
        export_cfg = self.config.export
        if export_cfg.mode == "overlay":
            return self.renderer.render(frame_data.frame, self.region, people)

        target = calculate_action_center(people, fallback=self._center)
        self._center = smooth_action_center(self._center, target, export_cfg.smoothing)

        if export_cfg.mode == "zoom":
            return crop_around_action_center(frame_data.frame, self._center, export_cfg.zoom_factor)

        rendered = self.renderer.render(frame_data.frame, self.region, people)
        window = crop_window(frame_data.width, frame_data.height, self._center, export_cfg.zoom_factor)
        return self.renderer.render_zoom_preview(rendered, window)

    def _wait_for_sink(self) -> bool:
        """Block until the sink is ready. False if the export was stopped meanwhile."""
        delay = self.config.export.backpressure_delay
        while not self.sink.is_ready():
            if not self._running:
                return False
            self.stats.backpressure_waits += 1
            time.sleep(delay)
        return True

    def _fail(self) -> None:
        self.state = ExportState.FAILED
        self._running = False
        if self._sink_opened:
            try:
                self.sink.abandon()
            except SinkError as e:
                logging.warning(f"Error abandoning sink: {e}")
            self._sink_opened = False


def create_pipeline_from_config(
    config: Dict[str, Any],
    input_path: str,
    detector: Optional[Detector] = None,
) -> ExportPipeline:
    """
    Factory function to create an ExportPipeline from a config dict.

    Args:
        config: Full application config dict (from load_config).
        input_path: Video file to export from.
        detector: Detector to use. Built from the `detection` section when omitted.
    """
    typed = Config.from_dict(config)
    source = OpenCVFrameSource(
        OpenCVFrameSourceConfig.from_source_config(input_path, config.get("source") or {})
    )
    sink = OpenCVVideoSink(OpenCVSinkConfig.from_export_config(config.get("export") or {}))
    if detector is None:
        detector = create_detector(config.get("detection") or {})

    return ExportPipeline(source, detector, sink, OverlayRenderer(), typed)


def export_video(
    input_path: str,
    output_name: str,
    start_time: float = 0.0,
    clip_duration: float = 30.0,
    grid_size: int = 20,
    threshold: float = 0.40,
    config: Optional[Dict[str, Any]] = None,
    detector: Optional[Detector] = None,
) -> ExportResult:
    """
    Export a clip with the tracking region overlay.

    Args:
        input_path: Source video file.
        output_name: File name for the result, written under export.output_dir.
        start_time: Clip start in seconds.
        clip_duration: Clip length in seconds.
        grid_size: Activity grid side length.
        threshold: Region cutoff as a fraction of the hottest cell.
        config: Optional config dict; defaults apply to anything missing. When
            omitted, `config/default.yaml` and `config/config.yaml` are loaded
            and validated, and logging is set up from them.
        detector: Optional detector; the YOLO detector is used when omitted.

    Raises:
        ConfigError: If the loaded configuration is invalid.
    """
    if config is None:
        config = load_config()
        is_valid, error_msg = validate_config(config)
        if not is_valid:
            logging.error(f"Configuration validation failed: {error_msg}")
            raise ConfigError(f"Configuration validation failed: {error_msg}")
        setup_logging(config["log_path"], config["log_level"])

    cfg = dict(config)
    cfg["heatmap"] = {**(cfg.get("heatmap") or {}), "grid_size": grid_size}
    cfg["region"] = {**(cfg.get("region") or {}), "threshold": threshold}

    pipeline = create_pipeline_from_config(cfg, input_path, detector=detector)
    output_path = os.path.join(pipeline.config.export.output_dir, output_name)
    return pipeline.run(output_path, start_time, clip_duration)
