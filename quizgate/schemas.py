import re
from pydantic import BaseModel, ConfigDict, Field, StrictInt, field_validator
from typing import List, Optional, Union

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

QuestionId = Union[int, str]


def normalize_email(v) -> str:
    s = str(v).strip()
    if not EMAIL_PATTERN.match(s):
        raise ValueError("email must be a valid address")
    return s


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ---------- vault documents ----------

class Question(BaseModel):
    id: QuestionId
    question: str
    options: List[str]
    answer: StrictInt


class PublicQuestion(BaseModel):
    """A question as shown to the quiz taker: no answer key."""

    id: QuestionId
    question: str
    options: List[str]


# ---------- quiz ----------

class SubmittedAnswer(BaseModel):
    id: QuestionId
    # exact match against the key: "0", true or 0.0 are not the answer 0
    choice: StrictInt


class ValidateQuizRequest(BaseModel):
    email: str
    answers: List[SubmittedAnswer]

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return normalize_email(v)


class QuizResult(BaseModel):
    score: int
    passed: bool
    token: Optional[str] = None


class ValidateQuizResponse(BaseModel):
    success: bool
    score: int
    token: Optional[str] = None


class VerifyTokenRequest(BaseModel):
    token: str = Field(min_length=1)


class VerifyTokenResponse(CamelModel):
    valid: bool
    email: Optional[str] = None
    issued_at: Optional[int] = Field(default=None, alias="issuedAt")


# ---------- analytics ----------

class TrackRequest(CamelModel):
    path: str
    referrer: Optional[str] = None
    user_agent: Optional[str] = Field(default=None, alias="userAgent")


class Hit(CamelModel):
    path: str
    referrer: str = "Direct"
    user_agent: str = Field(default="Unknown", alias="userAgent")
    timestamp: str


class LedgerStats(BaseModel):
    hits: List[Hit]
    total_views: int
    total_registrations: int
    estimated_active_users: int


class StatsRequest(BaseModel):
    password: str


class StatsResponse(CamelModel):
    active_users: int = Field(alias="activeUsers")
    page_views: int = Field(alias="pageViews")
    total_registrations: int = Field(alias="totalRegistrations")
    hits: List[Hit]


# ---------- registration ----------

class RegistrationRequest(BaseModel):
    email: str

    @field_validator("email", mode="before")
    @classmethod
    def check_email(cls, v):
        return normalize_email(v)


class RegistrationResponse(BaseModel):
    success: bool
    message: str


class SuccessResponse(BaseModel):
    success: bool = True


class PingResponse(BaseModel):
    status: str
    timestamp: str
