"""
Pipeline engine for the lawn area estimator.

One frame at a time: read, segment, derive the center-window signal, hand the
signal to the session controller, then apply any position results that have
arrived. A frame whose segmentation fails or is malformed is skipped; the
loop keeps going.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Callable, List, Optional

import cv2
import numpy as np

from models.config import Config, PipelineConfig
from models.errors import LawnAreaError, MalformedSegmentationError
from models.frame import FrameData
from models.signal import DetectionSignal
from observation import ObservationSource, create_source_from_config
from runtime.context import RuntimeContext


@dataclass
class PipelineStats:
    """Runtime statistics for the pipeline."""
    frame_count: int = 0
    skipped_frames: int = 0
    positive_signals: int = 0
    points_added: int = 0
    start_time: float = field(default_factory=time.time)
    last_stats_log_time: float = field(default_factory=time.time)
    consecutive_failures: int = 0


class PipelineEngine:
    """
    Main processing loop over an ObservationSource.

    Example:
        source = OpenCVSource(OpenCVSourceConfig(device_id=0))
        engine = PipelineEngine(source, ctx, PipelineConfig(display=True))
        engine.run()
    """

    def __init__(
        self,
        source: ObservationSource,
        ctx: RuntimeContext,
        config: PipelineConfig,
    ):
        self.source = source
        self.ctx = ctx
        self.config = config
        self.stats = PipelineStats()
        self._running = False
        self._callbacks: List[Callable[[FrameData, DetectionSignal], None]] = []

    def add_callback(self, callback: Callable[[FrameData, DetectionSignal], None]) -> None:
        """Register a function called with (frame_data, signal) after each processed frame."""
        self._callbacks.append(callback)

    @property
    def is_running(self) -> bool:
        return self._running

    def run(self) -> None:
        """
        Run the main processing loop.

        Opens the observation source, processes frames until stopped or
        exhausted, then closes resources.
        """
        self._running = True
        self.stats = PipelineStats()

        try:
            self.source.open()
            logging.info(f"Pipeline started: source={self.source.source_id}")

            while self._running:
                frame_data = self.source.read()

                if frame_data is None:
                    if getattr(self.source, "is_file", False):
                        logging.info("Recorded walk finished")
                        break
                    self.stats.consecutive_failures += 1
                    if self.stats.consecutive_failures >= self.config.max_consecutive_failures:
                        logging.error(
                            f"Too many consecutive failures ({self.stats.consecutive_failures}), stopping"
                        )
                        break
                    logging.warning(
                        f"Frame read failed ({self.stats.consecutive_failures}/"
                        f"{self.config.max_consecutive_failures})"
                    )
                    time.sleep(0.5)
                    continue

                self.stats.consecutive_failures = 0
                signal = self.process_frame(frame_data)
                if signal is None:
                    continue

                for callback in self._callbacks:
                    try:
                        callback(frame_data, signal)
                    except Exception as e:
                        logging.warning(f"Callback error: {e}")

                if self.config.display:
                    if not self._handle_display(frame_data, signal):
                        break

                self._handle_periodic_tasks()

        except KeyboardInterrupt:
            logging.info("Pipeline interrupted by user")
        except Exception as e:
            logging.exception(f"Pipeline error: {e}")
        finally:
            self._cleanup()

    def stop(self) -> None:
        """Signal the pipeline to stop after the current frame; no further frames are read."""
        self._running = False

    def process_frame(self, frame_data: FrameData) -> Optional[DetectionSignal]:
        """
        Process a single frame through segmentation, detection and the session.

        Returns:
            The frame's DetectionSignal, or None if the frame was skipped.
        """
        self.stats.frame_count += 1

        try:
            labels = self.ctx.segmenter.segment(frame_data.frame)
            signal = self.ctx.surface_detector.detect(
                labels, frame_data.width, frame_data.height, frame_index=frame_data.frame_index
            )
        except MalformedSegmentationError as e:
            self.stats.skipped_frames += 1
            logging.warning(f"Skipping frame {frame_data.frame_index}: {e}")
            return None
        except Exception as e:
            self.stats.skipped_frames += 1
            logging.warning(f"Segmentation failed on frame {frame_data.frame_index}: {e}")
            return None

        if signal:
            self.stats.positive_signals += 1
        self.ctx.session.handle_signal(signal)
        self.stats.points_added += self.ctx.session.drain()

        self.ctx.record_frame(fps=self.ctx.config.camera.fps)

        return signal

    def _draw_overlays(self, frame: np.ndarray, signal: DetectionSignal) -> np.ndarray:
        """Draw the center window and session status on the frame."""
        COLOR_HIT = (0, 255, 0)  # Green
        COLOR_MISS = (0, 0, 255)  # Red

        h, w = frame.shape[:2]
        x1, y1, x2, y2 = self.ctx.surface_detector.window_bounds(w, h)
        color = COLOR_HIT if signal else COLOR_MISS
        cv2.rectangle(frame, (x1, y1), (x2, y2), color, 2)

        session = self.ctx.session
        label = f"{session.status.value} | points={len(session.state.trace)} | px={signal.pixel_count}"
        font = cv2.FONT_HERSHEY_SIMPLEX
        (tw, th), _ = cv2.getTextSize(label, font, 0.6, 1)
        cv2.rectangle(frame, (8, 8), (16 + tw, 16 + th + 4), (0, 0, 0), -1)
        cv2.putText(frame, label, (12, 12 + th), font, 0.6, (255, 255, 255), 1)
        return frame

    def _handle_display(self, frame_data: FrameData, signal: DetectionSignal) -> bool:
        """
        Handle cv2 display window.

        Keys: 's' starts/stops the session, 'q' quits.
        Returns False if user pressed 'q'.
        """
        cv2.imshow("Lawn Area", self._draw_overlays(frame_data.frame.copy(), signal))
        key = cv2.waitKey(1) & 0xFF
        if key == ord("s"):
            try:
                result = self.ctx.session.toggle()
            except LawnAreaError as e:
                logging.warning(f"Session toggle failed: {e}")
            else:
                if result is not None:
                    self._report(result)
        return key != ord("q")

    def _handle_periodic_tasks(self) -> None:
        now = time.time()
        if now - self.stats.last_stats_log_time >= self.config.stats_log_interval:
            logging.info(
                f"Pipeline stats: frames={self.stats.frame_count}, "
                f"skipped={self.stats.skipped_frames}, "
                f"signals={self.stats.positive_signals}, "
                f"points={self.stats.points_added}"
            )
            self.stats.last_stats_log_time = now

    @staticmethod
    def _report(result) -> None:
        if result.ok:
            logging.info(f"Estimated lawn area: {result.formatted_area()} ({len(result.points)} points)")
        else:
            logging.warning(f"No area could be computed: {result.error}")

    def _cleanup(self) -> None:
        self._running = False

        try:
            self.source.close()
        except Exception as e:
            logging.warning(f"Error closing source: {e}")

        if self.config.stop_session_on_exit and self.ctx.session.state.is_tracking:
            try:
                self._report(self.ctx.session.stop())
            except LawnAreaError as e:
                logging.warning(f"Could not stop session: {e}")

        if self.config.display:
            cv2.destroyAllWindows()

        logging.info("Pipeline stopped")


def create_engine_from_config(
    config: Config,
    ctx: RuntimeContext,
    display: bool = False,
) -> PipelineEngine:
    """
    Factory function to create a PipelineEngine from the typed config.

    Args:
        config: Full application config.
        ctx: RuntimeContext with segmenter, surface detector and session.
        display: Enable display window.
    """
    source = create_source_from_config(config.camera, source_id="walk-camera")
    return PipelineEngine(source, ctx, replace(config.pipeline, display=display))
