"""Typed questionnaire configuration (post-parse shape).

Stored JSON uses camelCase keys; models expose snake_case attributes and
accept either form on input. Primitive fields are strict so that a number
is never silently accepted where the artifact declares a string.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictBool, StrictFloat, StrictInt, StrictStr
from pydantic.alias_generators import to_camel

from funnel_manifest.models.registry import (
    SCHEMA_VERSION_V1,
    ConditionalLogicType,
    ConditionOperator,
    LogicJoin,
    QuestionType,
)


Number = Union[StrictInt, StrictFloat]


class ArtifactModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class QuestionValidation(ArtifactModel):
    required: Optional[StrictBool] = None
    min: Optional[Number] = None
    max: Optional[Number] = None
    pattern: Optional[StrictStr] = None
    message: Optional[StrictStr] = None


class QuestionOption(ArtifactModel):
    value: StrictStr
    label: StrictStr
    help_text: Optional[StrictStr] = None


class Question(ArtifactModel):
    id: StrictStr
    key: StrictStr
    type: QuestionType
    label: StrictStr
    help_text: Optional[StrictStr] = None
    required: StrictBool = False
    options: Optional[List[QuestionOption]] = None
    validation: Optional[QuestionValidation] = None
    min_value: Optional[Number] = None
    max_value: Optional[Number] = None


class Condition(ArtifactModel):
    question_id: StrictStr
    operator: ConditionOperator
    value: Union[StrictBool, StrictInt, StrictFloat, StrictStr, List[StrictStr]]


class ConditionalLogic(ArtifactModel):
    type: ConditionalLogicType
    conditions: List[Condition]
    logic: LogicJoin = LogicJoin.AND


class Step(ArtifactModel):
    id: StrictStr
    title: StrictStr
    description: Optional[StrictStr] = None
    questions: List[Question]
    conditional_logic: Optional[ConditionalLogic] = None


class QuestionnaireConfig(ArtifactModel):
    schema_version: StrictStr = SCHEMA_VERSION_V1
    version: StrictStr = "1.0"
    steps: List[Step]
    conditional_logic: Optional[List[ConditionalLogic]] = None
    metadata: Optional[Dict[str, Any]] = None

    def iter_questions(self):
        """Yield ``(step_index, step, question)`` in declaration order."""
        for step_index, step in enumerate(self.steps):
            for question in step.questions:
                yield step_index, step, question

    def question_keys(self) -> List[str]:
        return [q.key for _, _, q in self.iter_questions()]


__all__ = [
    "ArtifactModel",
    "Number",
    "QuestionValidation",
    "QuestionOption",
    "Question",
    "Condition",
    "ConditionalLogic",
    "Step",
    "QuestionnaireConfig",
]
