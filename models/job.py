"""
PreviewJob: the unit of work handed to the dispatcher.

A job is created by the caller before dispatch and is read-only afterwards.
The scratch directory belongs to that job alone; the caller creates it and
removes it once the Result has been consumed.

Remote file sources are materialized by the dispatcher, which builds a NEW
job pointing at the local copy (dataclasses.replace) rather than mutating
this one.
"""

from dataclasses import dataclass
from typing import Optional

from models.enums import JobKind


@dataclass(frozen=True)
class PreviewJob:
    source: str                        # local path, http(s) URL or s3://bucket/key
    directory: str                     # scratch directory owned by this job
    mime_type: Optional[str] = None    # declared MIME type, if the caller knows it
    kind: Optional[JobKind] = None     # declared content kind, required for links

    @property
    def is_remote(self) -> bool:
        return self.source.startswith(("http://", "https://", "s3://"))

    def __repr__(self) -> str:
        kind = self.kind.value if self.kind else self.mime_type
        return f"<PreviewJob [{kind}] {self.source}>"
