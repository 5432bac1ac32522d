"""subextract: pull embedded subtitle streams out of video files."""

from .extractor import ExtractionOutcome, StreamExtractor
from .lister import StreamDescriptor, StreamLister
from .toolkit import ToolkitConfig

__version__ = "1.0.0"
__all__ = [
    "ExtractionOutcome",
    "StreamDescriptor",
    "StreamExtractor",
    "StreamLister",
    "ToolkitConfig",
]
