"""
Region Export - Detection Module

This module finds people in video frames and reports normalized boxes.
"""

from .base import Detector
from .yolo_detector import UltralyticsPersonDetector
from .factory import create_detector

__all__ = ['Detector', 'UltralyticsPersonDetector', 'create_detector']
