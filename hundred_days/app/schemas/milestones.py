from pydantic import BaseModel


class MilestoneOut(BaseModel):
    day: int
    tag: str
    emoji: str
    message: str


class MilestoneEvaluation(BaseModel):
    day: int
    is_milestone: bool
    milestone: MilestoneOut | None = None


class SeenMilestones(BaseModel):
    challenge_id: str
    days: list[int]
