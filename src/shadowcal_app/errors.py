"""Exception types raised by shadowcal."""
from __future__ import annotations


class ShadowcalError(ValueError):
    """Base class for all shadowcal errors."""


class InvalidRoomDimensions(ShadowcalError):
    """Room width, height, or depth is not a finite positive number."""


class InvalidCameraParameters(ShadowcalError):
    """Camera field of view or aspect ratio is outside its valid range."""


class InvalidDisplayParameters(ShadowcalError):
    """Display scale is not a finite positive percentage."""


class RecordValidationError(ShadowcalError):
    """A persisted calibration or shadow record failed schema validation."""


class CalibrationStateError(ShadowcalError):
    """A calibration step or screenshot could not be found."""


class AnnotationError(ShadowcalError):
    """The annotation workflow was driven out of order."""
