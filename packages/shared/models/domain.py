from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from .enums import ReportKind


class ReportArtifact(BaseModel):
    """A generated report, held in memory until it is handed to the caller."""
    model_config = ConfigDict(frozen=True)

    kind: ReportKind
    filename: str
    media_type: str
    content: bytes = Field(repr=False)
    generated_at: datetime

    @property
    def size(self) -> int:
        return len(self.content)
