# tutor_api/schemas/catalog.py
from typing import List
from pydantic import BaseModel, ConfigDict, Field


class CandidateMisconception(BaseModel):
    """카탈로그 오개념 레코드 (불변, 파이프라인에서 수정하지 않음)"""
    model_config = ConfigDict(frozen=True)

    id: str
    topic: str
    name: str = Field(min_length=1)
    description: str = Field(min_length=1)
    evidence_patterns: List[str] = Field(default_factory=list)
    remediation_template: str = ""


class FollowUpTemplate(BaseModel):
    model_config = ConfigDict(frozen=True)

    prompt: str
    correct_answer: str
    why_this_targets: str


class TopicTemplates(BaseModel):
    """토픽별 정적 후속 문제 / teach-back / key takeaway"""
    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    follow_up: FollowUpTemplate
    teach_back_prompt: str
    key_takeaway: str = Field(max_length=100)
