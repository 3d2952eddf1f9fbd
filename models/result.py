"""
Result value type: the outcome of processing one content item.

A Result is built exactly once, by whichever processor finishes the job,
and is frozen afterwards. Its metadata is assembled from parts contributed
by several stages (sizing, embed classification, video conversion...);
merge_metadata() refuses to let two stages write the same key.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from models.enums import ResultStatus


def merge_metadata(*parts: dict) -> dict:
    """
    Combine metadata contributions, preserving their order.

    Raises:
        ValueError if two parts define the same key.
    """
    merged: dict[str, Any] = {}
    for part in parts:
        for key, value in part.items():
            if key in merged:
                raise ValueError(f"Metadata key '{key}' written by more than one stage")
            merged[key] = value
    return merged


@dataclass(frozen=True)
class Result:
    status: ResultStatus
    thumbnail: Optional[str] = None
    image: Optional[str] = None
    pdf: Optional[str] = None
    metadata: dict = field(default_factory=dict)

    @classmethod
    def done(cls, thumbnail: str, image: str, *metadata: dict, pdf: Optional[str] = None) -> "Result":
        return cls(ResultStatus.DONE, thumbnail, image, pdf, merge_metadata(*metadata))

    @classmethod
    def unsupported(cls, mime_type: Optional[str]) -> "Result":
        return cls(ResultStatus.UNSUPPORTED, metadata={"mime_type": mime_type})

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "thumbnail": self.thumbnail,
            "image": self.image,
            "pdf": self.pdf,
            "metadata": dict(self.metadata),
        }
