"""
Slide Gesture Control
=====================

Hand-gesture control for slideshows: turns per-frame hand landmarks (or
raw webcam brightness) into debounced gesture events.

Packages:
    - core: shared types, event bus, pipeline orchestrator
    - detection: MediaPipe adapter and landmark features
    - recognition: rule classifier and motion swipe tracker
    - control: debouncer, keyboard simulation, presentation controller
    - capture: interactive per-user calibration
    - intelligence: calibration profile persistence
    - utils: config, logging, performance monitoring
"""

__version__ = "1.0.0"
