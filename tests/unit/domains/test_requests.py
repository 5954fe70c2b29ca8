"""Unit tests for the career-assistance request builders."""

import pytest

from generation_layer.domains.requests import (
    RequestBuilder,
    cover_letter_key,
    format_wrong_answers,
    improvement_tip_key,
    insights_key,
    normalize_skills,
    quiz_key,
)
from generation_layer.orchestration.exceptions import InvalidRequestError
from generation_layer.provider.prompt_builder import PromptBuilder
from generation_layer.schemas.catalog import (
    COVER_LETTER_SCHEMA_NAME,
    IMPROVEMENT_TIP_SCHEMA_NAME,
    INSIGHTS_SCHEMA_NAME,
    QUIZ_SCHEMA_NAME,
)
from generation_layer.validation.pipeline import ResponseValidator


@pytest.fixture
def request_builder(test_settings):
    return RequestBuilder(PromptBuilder(), test_settings)


WRONG_ANSWERS = [
    {"question": "What is a JOIN?", "answer": "Combines rows", "user_answer": "Deletes rows"},
    {"question": "What is an index?", "answer": "Lookup structure", "user_answer": "A table"},
]


class TestKeys:
    
    def test_insights_key_is_case_and_space_insensitive(self):
        assert insights_key("  Health   Care ") == insights_key("health care") == "insights:health care"
    
    def test_quiz_key_ignores_skill_order_and_case(self):
        assert quiz_key("Tech", ["SQL", "python"]) == quiz_key("tech", ["Python", "sql"])
        assert quiz_key("tech", ["SQL", "Python"]) == "quiz:tech:python,sql"
    
    def test_quiz_key_without_skills(self):
        assert quiz_key("tech", []) == "quiz:tech:"
    
    def test_cover_letter_key_is_slugged(self):
        assert cover_letter_key("Acme, Inc.", "Senior Data Engineer") == (
            "cover-letter:acme-inc:senior-data-engineer"
        )
    
    def test_improvement_tip_key_depends_on_answers(self):
        first = improvement_tip_key("tech", "a")
        second = improvement_tip_key("tech", "b")
        
        assert first != second
        assert first.startswith("improvement-tip:tech:")
        assert len(first.rsplit(":", 1)[1]) == 16
    
    def test_normalize_skills_dedupes(self):
        assert normalize_skills([" Python ", "python", "", "SQL  Server"]) == ["Python", "SQL Server"]
    
    def test_format_wrong_answers(self):
        text = format_wrong_answers(WRONG_ANSWERS[:1])
        
        assert text == (
            'Question: "What is a JOIN?"\n'
            'Correct Answer: "Combines rows"\n'
            'User Answer: "Deletes rows"'
        )


class TestRequestBuilder:
    
    def test_insights_request(self, request_builder, test_settings):
        key, request = request_builder.insights(" Healthcare ")
        
        assert key == "insights:healthcare"
        assert request.schema_name == INSIGHTS_SCHEMA_NAME
        assert request.context == {"industry": "Healthcare"}
        assert "Healthcare industry" in request.prompt
        assert request.fresh_ttl_seconds == test_settings.FRESH_TTL_SECONDS
    
    def test_insights_requires_industry(self, request_builder):
        with pytest.raises(InvalidRequestError):
            request_builder.insights("   ")
    
    def test_quiz_request(self, request_builder):
        key, request = request_builder.quiz("tech", ["Python", "SQL", "python"])
        
        assert key == "quiz:tech:python,sql"
        assert request.schema_name == QUIZ_SCHEMA_NAME
        assert request.context["skills"] == "Python, SQL"
        assert "exactly 4 options" in request.prompt
    
    def test_cover_letter_request(self, request_builder):
        key, request = request_builder.cover_letter(
            job_title="Nurse",
            company_name="City Hospital",
            job_description="Care for patients",
            industry="healthcare",
            experience=4,
            skills=["Triage"],
        )
        
        assert key == "cover-letter:city-hospital:nurse"
        assert request.schema_name == COVER_LETTER_SCHEMA_NAME
        assert request.context["experience"] == "4"
        assert "Nurse position at City Hospital" in request.prompt
    
    def test_cover_letter_explicit_key(self, request_builder):
        key, _ = request_builder.cover_letter("Nurse", "City Hospital", "", key="cover-letter:user-42")
        
        assert key == "cover-letter:user-42"
    
    def test_cover_letter_fallback_is_schema_valid(self, request_builder):
        key, request = request_builder.cover_letter("Nurse", "City Hospital", "Care")
        
        letter = ResponseValidator().conform(request.fallback(key, request.context), request.schema)
        
        assert "Nurse role at City Hospital" in letter
    
    def test_cover_letter_requires_title_and_company(self, request_builder):
        with pytest.raises(InvalidRequestError):
            request_builder.cover_letter("", "Acme", "desc")
    
    def test_improvement_tip_request(self, request_builder):
        key, request = request_builder.improvement_tip("tech", WRONG_ANSWERS)
        
        assert key.startswith("improvement-tip:tech:")
        assert request.schema_name == IMPROVEMENT_TIP_SCHEMA_NAME
        assert 'Question: "What is an index?"' in request.prompt
    
    def test_improvement_tip_requires_answers(self, request_builder):
        with pytest.raises(InvalidRequestError):
            request_builder.improvement_tip("tech", [])


class TestRebuild:
    
    def test_rebuild_insights_matches_original(self, request_builder):
        _, original = request_builder.insights("finance")
        
        rebuilt = request_builder.rebuild(INSIGHTS_SCHEMA_NAME, original.context)
        
        assert rebuilt.prompt == original.prompt
        assert rebuilt.schema == original.schema
    
    def test_rebuild_quiz_restores_skills(self, request_builder):
        _, original = request_builder.quiz("tech", ["Python", "SQL"])
        
        rebuilt = request_builder.rebuild(QUIZ_SCHEMA_NAME, original.context)
        
        assert rebuilt.prompt == original.prompt
    
    def test_rebuild_cover_letter(self, request_builder):
        _, original = request_builder.cover_letter("Nurse", "City Hospital", "Care", skills=["Triage"])
        
        rebuilt = request_builder.rebuild(COVER_LETTER_SCHEMA_NAME, original.context)
        
        assert rebuilt.prompt == original.prompt
    
    def test_rebuild_improvement_tip(self, request_builder):
        _, original = request_builder.improvement_tip("tech", WRONG_ANSWERS)
        
        rebuilt = request_builder.rebuild(IMPROVEMENT_TIP_SCHEMA_NAME, original.context)
        
        assert rebuilt.prompt == original.prompt
    
    def test_rebuild_unknown_schema(self, request_builder):
        with pytest.raises(InvalidRequestError):
            request_builder.rebuild("horoscope", {})
    
    def test_rebuild_incomplete_context(self, request_builder):
        with pytest.raises(InvalidRequestError) as exc_info:
            request_builder.rebuild(INSIGHTS_SCHEMA_NAME, {})
        
        assert "industry" in exc_info.value.message
