"""
Response schemas for the career-assistance content types.

- industry_insights: salary ranges, growth rate, demand/outlook enums, skills
- interview_quiz: exactly 10 questions with exactly 4 options each
- cover_letter: markdown letter with a soft length target
- improvement_tip: one or two encouraging sentences
"""

from generation_layer.models.enums import DemandLevel, FieldType, MarketOutlook
from generation_layer.schemas.spec import ArrayRule, FieldSpec, ResponseSchema

INSIGHTS_SCHEMA_NAME = "industry_insights"
QUIZ_SCHEMA_NAME = "interview_quiz"
COVER_LETTER_SCHEMA_NAME = "cover_letter"
IMPROVEMENT_TIP_SCHEMA_NAME = "improvement_tip"

QUIZ_QUESTION_COUNT = 10
QUIZ_OPTION_COUNT = 4


SALARY_RANGE_FIELDS = (
    FieldSpec("role", FieldType.STRING),
    FieldSpec("min", FieldType.NUMBER, default=0),
    FieldSpec("max", FieldType.NUMBER, default=0),
    FieldSpec("median", FieldType.NUMBER, default=0),
    FieldSpec("location", FieldType.STRING, default=""),
)

INSIGHTS_SCHEMA = ResponseSchema.structured(
    INSIGHTS_SCHEMA_NAME,
    FieldSpec(
        "salaryRanges",
        FieldType.OBJECT_LIST,
        default=[],
        item_fields=SALARY_RANGE_FIELDS,
        array=ArrayRule(max_length=10),
    ),
    FieldSpec("growthRate", FieldType.NUMBER, default=0, description="Annual growth in percent"),
    FieldSpec(
        "demandLevel",
        FieldType.ENUM,
        default=DemandLevel.MEDIUM.value,
        enum_values=tuple(level.value for level in DemandLevel),
    ),
    FieldSpec("topSkills", FieldType.STRING_LIST, default=[], array=ArrayRule(max_length=10)),
    FieldSpec(
        "recommendedSkills",
        FieldType.STRING_LIST,
        default=[],
        aliases=("recommendations",),
        array=ArrayRule(max_length=10),
    ),
    FieldSpec(
        "marketOutlook",
        FieldType.ENUM,
        default=MarketOutlook.NEUTRAL.value,
        enum_values=tuple(outlook.value for outlook in MarketOutlook),
    ),
    FieldSpec("keyTrends", FieldType.STRING_LIST, default=[], array=ArrayRule(max_length=10)),
)

QUIZ_QUESTION_FIELDS = (
    FieldSpec("question", FieldType.STRING),
    FieldSpec("options", FieldType.STRING_LIST, array=ArrayRule(exact=QUIZ_OPTION_COUNT)),
    FieldSpec("correctAnswer", FieldType.STRING, must_match="options"),
    FieldSpec("explanation", FieldType.STRING, default=""),
)

QUIZ_SCHEMA = ResponseSchema.structured(
    QUIZ_SCHEMA_NAME,
    FieldSpec(
        "questions",
        FieldType.OBJECT_LIST,
        item_fields=QUIZ_QUESTION_FIELDS,
        array=ArrayRule(exact=QUIZ_QUESTION_COUNT),
    ),
)


def cover_letter_schema(soft_max_words: int = 400) -> ResponseSchema:
    """Markdown cover letter, soft word target."""
    return ResponseSchema.free_text(
        COVER_LETTER_SCHEMA_NAME, min_chars=1, soft_max_words=soft_max_words
    )


def improvement_tip_schema(soft_max_words: int = 60) -> ResponseSchema:
    return ResponseSchema.free_text(
        IMPROVEMENT_TIP_SCHEMA_NAME, min_chars=1, soft_max_words=soft_max_words
    )
