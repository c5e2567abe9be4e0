from pydantic import BaseModel

from calloutdex.domain.callout import CalloutItem


class CalloutRef(BaseModel):
    """A callout as last seen by the client, located by document and line."""

    document_path: str
    type: str
    title: str = ""
    id: str | None = None
    line_number: int

    def to_callout(self) -> CalloutItem:
        return CalloutItem(
            document_path=self.document_path,
            type=self.type,
            title=self.title,
            id=self.id,
            line_number=self.line_number,
        )


class GraphRequest(BaseModel):
    focal: CalloutRef
    width: int | None = None
    height: int | None = None
    current_path: str | None = None


class CalloutList(BaseModel):
    count: int
    callouts: list[CalloutItem]

    @classmethod
    def of(cls, callouts: list[CalloutItem]) -> "CalloutList":
        return cls(count=len(callouts), callouts=callouts)
