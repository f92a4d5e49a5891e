"""Stream Segmenter - Streaming speech segmentation with an energy VAD."""

try:
    from stream_segmenter._version import __version__
except ImportError:
    __version__ = "0.0.0.dev0"

__all__ = ["__version__"]
