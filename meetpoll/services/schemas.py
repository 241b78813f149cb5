from typing import List, Optional, Tuple

from pydantic import BaseModel

from ..domain.models import AggregatedRange, Form


class CreateRoomResponse(BaseModel):
    error: Optional[str] = None
    redirect: Optional[str] = None


class JoinRoomResponse(BaseModel):
    error: Optional[str] = None
    redirect: Optional[str] = None


class SubmitFormResponse(BaseModel):
    success: bool
    redirect: str
    error: Optional[str] = None


class FormPayload(BaseModel):
    name: str
    other: str
    events: List[Tuple[str, str]]

    @classmethod
    def from_domain(cls, form: Form) -> "FormPayload":
        return cls(
            name=form.participant_name or "",
            other=form.note or "",
            events=[interval.as_pair() for interval in form.availability],
        )


class AuthenticateResponse(BaseModel):
    redirect: Optional[str] = None
    success: Optional[bool] = None
    token: Optional[str] = None
    forms: Optional[List[FormPayload]] = None


class RangePayload(BaseModel):
    start: str
    end: str
    count: int
    optimal: bool

    @classmethod
    def from_domain(cls, aggregated: AggregatedRange, optimal: bool) -> "RangePayload":
        return cls(
            start=aggregated.start.isoformat(),
            end=aggregated.end.isoformat(),
            count=aggregated.count,
            optimal=optimal,
        )


class SubmissionPayload(BaseModel):
    name: str
    other: str


class ViewRoomResponse(BaseModel):
    success: bool
    redirect: Optional[str] = None
    ranges: Optional[List[RangePayload]] = None
    submissions: Optional[List[SubmissionPayload]] = None


class ShutdownResponse(BaseModel):
    success: bool
    message: str
