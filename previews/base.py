"""
Abstract base class for preview processors.

Each content kind (image, video, office, pdf, link, youtube, vimeo) implements
this interface. The dispatcher calls processor.run(job) without knowing which
kind it is; it looks the processor up in the registry by JobKind.

Strategy pattern:
- AbstractPreviewProcessor = interface
- ImagePreview, VideoPreview, OfficePreview, ... = implementations
- registry.py = factory lookup

To add a new content kind:
1. Add it to JobKind
2. Create a class that inherits AbstractPreviewProcessor
3. Implement run() and kind, and add it to the registry
"""

from abc import ABC, abstractmethod

from models.enums import JobKind
from models.job import PreviewJob
from models.result import Result


class AbstractPreviewProcessor(ABC):

    @abstractmethod
    async def run(self, job: PreviewJob) -> Result:
        """
        Generate the previews for one job.

        Args:
            job: a job whose source is already local (for files) or a URL
                 (for links). Output files go into job.directory.

        Returns:
            A Result with status DONE and both thumbnail and image set.

        Raises:
            PreviewError on any fatal failure; no partial Result is returned.
        """
        ...

    @property
    @abstractmethod
    def kind(self) -> JobKind:
        """The JobKind this processor handles."""
        ...
