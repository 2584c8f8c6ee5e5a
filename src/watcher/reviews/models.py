from pydantic import BaseModel, Field


class Reviewer(BaseModel):
    username: str
    pseudonym: str


class ReviewRequest(BaseModel):
    university: str
    student: str
    task: str
    url: str

    pipeline_status: str
    merge_status: str
    num_problems: int = 0
    num_resolved_problems: int = 0
    approved_by: list[Reviewer] = Field(default_factory=list)


class DeadlineTask(BaseModel):
    task: str
    score: int | None = None


class DeadlineGroup(BaseModel):
    group: str | None = None
    start: str | None = None
    deadline: str | None = None
    tasks: list[DeadlineTask] = Field(default_factory=list)
