"""Error taxonomy shared by the analysis core and its collaborators."""


class ChromaLensError(Exception):
    """Base class for every error raised by the package."""


class InvalidImageError(ChromaLensError, ValueError):
    """Zero-area, malformed, or mismatched pixel buffers."""


class DecodeError(ChromaLensError):
    """Source acquisition or decoding failed before analysis could start."""
