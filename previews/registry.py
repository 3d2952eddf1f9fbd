"""
Processor registry: maps JobKind to processor instances.

When the dispatcher has worked out what a job is ("image", "vimeo", ...),
it needs the processor that handles it. This registry does that lookup.
One place that knows all the kinds.
"""

from models.enums import JobKind
from previews.base import AbstractPreviewProcessor
from previews.image import ImagePreview
from previews.link import LinkPreview, VimeoPreview, YouTubePreview
from previews.office import OfficePreview
from previews.pdf import PdfPreview
from previews.video import VideoPreview

# Each processor is instantiated once and reused (they hold no per-job state)
_REGISTRY: dict[JobKind, AbstractPreviewProcessor] = {}


def _register_defaults() -> None:
    for processor_cls in [
        ImagePreview,
        VideoPreview,
        OfficePreview,
        PdfPreview,
        LinkPreview,
        YouTubePreview,
        VimeoPreview,
    ]:
        register(processor_cls())


def register(processor: AbstractPreviewProcessor) -> None:
    _REGISTRY[processor.kind] = processor


_register_defaults()


def get_processor(kind: JobKind) -> AbstractPreviewProcessor:
    """Look up a processor by kind. Raises ValueError if nothing handles it."""
    processor = _REGISTRY.get(kind)
    if processor is None:
        raise ValueError(
            f"No processor for kind: '{kind.value}'. Available: {[k.value for k in _REGISTRY]}"
        )
    return processor
