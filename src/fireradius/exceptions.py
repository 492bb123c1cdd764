class FireRadiusError(Exception):
    """Base exception for fireradius"""
    pass

class MalformedRecord(FireRadiusError):
    """Raised when a single detection row cannot be parsed"""
    pass

class UnreadableFile(FireRadiusError):
    """Raised when an input file cannot be opened or has no usable header"""
    pass

class InvalidCoordinate(FireRadiusError, ValueError):
    """Raised when a coordinate outside the valid geographic range reaches the reprojector"""
    pass

class ConfigurationError(FireRadiusError):
    """Raised when the pipeline configuration is invalid"""
    pass

class UnreadableFileWarning(UserWarning):
    """Emitted when an input file is skipped"""
    pass

class CoarseBoundsWarning(UserWarning):
    """Emitted when the coarse bounding box does not enclose the largest buffer"""
    pass
