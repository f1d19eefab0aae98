"""AI insight panel schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

InsightKind = Literal["diet", "exercise"]


class TextSpan(BaseModel):
    text: str
    bold: bool = False


class InsightBlock(BaseModel):
    """One rendered line of an insight plan."""

    kind: Literal["paragraph", "bullet", "break"]
    spans: list[TextSpan] = Field(default_factory=list)


class InsightResult(BaseModel):
    """State of one AI insight card."""

    kind: InsightKind
    title: str
    is_loading: bool = False
    text: str = ""
    blocks: list[InsightBlock] = Field(default_factory=list)
    error: str | None = None
    generated_at: datetime | None = None
