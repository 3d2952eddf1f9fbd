"""
Shared enumerations used across the entire project.

Using Python enums (inheriting from str) means:
- They serialize to JSON automatically ("done", not "ResultStatus.DONE")
- They can be compared directly against plain strings from a job context
- Typos become immediate errors instead of silent bugs
"""

import enum


class ResultStatus(str, enum.Enum):
    DONE = "done"                # thumbnail and image were generated
    ERROR = "error"              # the job failed, see the error payload
    UNSUPPORTED = "unsupported"  # no processor handles this content type


class JobKind(str, enum.Enum):
    IMAGE = "image"      # raster or vector image
    VIDEO = "video"      # frame grab + optional H.264 transcode
    OFFICE = "office"    # converted to PDF first
    PDF = "pdf"          # first page is rasterized
    LINK = "link"        # screenshot + embeddability check
    YOUTUBE = "youtube"  # platform thumbnail
    VIMEO = "vimeo"      # JSON-LD thumbnail + HTTPS embed URL
    UNSUPPORTED = "unsupported"

    @property
    def is_link(self) -> bool:
        return self in (JobKind.LINK, JobKind.YOUTUBE, JobKind.VIMEO)


class Protocol(str, enum.Enum):
    HTTP = "http"
    HTTPS = "https"
