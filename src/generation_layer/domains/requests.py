"""
GenerationRequest builders for the career-assistance content types.

Each builder normalizes its inputs, derives the generation key, renders
the prompt template and pairs it with the matching schema and fallback
policy. ``rebuild`` turns a stored artifact's schema name and context
back into a request, which is how the background refresh regenerates
content without the original caller.
"""

import hashlib
import re
from typing import Any, Iterable, Mapping, Optional

import structlog

from generation_layer.config import Settings
from generation_layer.fallback.bank import (
    improvement_tip_fallback,
    insights_fallback,
    quiz_fallback,
)
from generation_layer.fallback.synthesizer import template_policy
from generation_layer.models.request import GenerationRequest
from generation_layer.orchestration.exceptions import InvalidRequestError
from generation_layer.provider.prompt_builder import PromptBuilder
from generation_layer.schemas.catalog import (
    COVER_LETTER_SCHEMA_NAME,
    IMPROVEMENT_TIP_SCHEMA_NAME,
    INSIGHTS_SCHEMA,
    INSIGHTS_SCHEMA_NAME,
    QUIZ_OPTION_COUNT,
    QUIZ_QUESTION_COUNT,
    QUIZ_SCHEMA,
    QUIZ_SCHEMA_NAME,
    cover_letter_schema,
    improvement_tip_schema,
)

logger = structlog.get_logger(__name__)

INSIGHTS_TEMPLATE = "industry_insights.j2"
QUIZ_TEMPLATE = "interview_quiz.j2"
COVER_LETTER_TEMPLATE = "cover_letter.j2"
COVER_LETTER_FALLBACK_TEMPLATE = "fallback_cover_letter.md.j2"
IMPROVEMENT_TIP_TEMPLATE = "improvement_tip.j2"

SKILL_SEPARATOR = ", "

_WHITESPACE = re.compile(r"\s+")
_SLUG_UNSAFE = re.compile(r"[^a-z0-9]+")


def clean_text(value: Optional[str]) -> str:
    """Trim and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", value or "").strip()


def normalize_industry(industry: str) -> str:
    return clean_text(industry).lower()


def normalize_skills(skills: Iterable[str]) -> list[str]:
    """Cleaned, de-duplicated (case-insensitively) skills in input order."""
    seen = set()
    result = []
    for skill in skills or ():
        cleaned = clean_text(skill)
        if cleaned and cleaned.lower() not in seen:
            seen.add(cleaned.lower())
            result.append(cleaned)
    return result


def _slug(value: str) -> str:
    return _SLUG_UNSAFE.sub("-", value.lower()).strip("-")


def insights_key(industry: str) -> str:
    return f"insights:{normalize_industry(industry)}"


def quiz_key(industry: str, skills: Iterable[str]) -> str:
    skill_part = ",".join(sorted(skill.lower() for skill in normalize_skills(skills)))
    return f"quiz:{normalize_industry(industry)}:{skill_part}"


def cover_letter_key(company_name: str, job_title: str) -> str:
    return f"cover-letter:{_slug(clean_text(company_name))}:{_slug(clean_text(job_title))}"


def improvement_tip_key(industry: str, wrong_answers_text: str) -> str:
    digest = hashlib.sha256(wrong_answers_text.encode("utf-8")).hexdigest()[:16]
    return f"improvement-tip:{normalize_industry(industry)}:{digest}"


def format_wrong_answers(wrong_answers: Iterable[Mapping[str, Any]]) -> str:
    """Render quiz mistakes the way the improvement-tip prompt expects."""
    blocks = []
    for item in wrong_answers:
        blocks.append(
            f'Question: "{clean_text(str(item.get("question", "")))}"\n'
            f'Correct Answer: "{clean_text(str(item.get("answer", "")))}"\n'
            f'User Answer: "{clean_text(str(item.get("user_answer", "")))}"'
        )
    return "\n\n".join(blocks)


class RequestBuilder:
    """
    Builds GenerationRequests for every supported content type.
    
    Attributes:
        prompt_builder: Jinja2 renderer for prompts and the fallback letter
        settings: TTL and length targets
    """
    
    def __init__(self, prompt_builder: PromptBuilder, settings: Settings):
        self.prompt_builder = prompt_builder
        self.settings = settings
        self._letter_fallback = template_policy(COVER_LETTER_FALLBACK_TEMPLATE, prompt_builder)
    
    def insights(self, industry: str) -> tuple[str, GenerationRequest]:
        """Key and request for an industry's market insights."""
        industry = clean_text(industry)
        if not industry:
            raise InvalidRequestError("industry is required")
        
        context = {"industry": industry}
        request = GenerationRequest(
            prompt=self.prompt_builder.render(INSIGHTS_TEMPLATE, context),
            schema=INSIGHTS_SCHEMA,
            fallback=insights_fallback,
            context=context,
            template_name=INSIGHTS_TEMPLATE,
            fresh_ttl_seconds=self.settings.FRESH_TTL_SECONDS,
        )
        return insights_key(industry), request
    
    def quiz(self, industry: str, skills: Iterable[str] = ()) -> tuple[str, GenerationRequest]:
        """Key and request for a 10-question technical interview quiz."""
        industry = clean_text(industry)
        if not industry:
            raise InvalidRequestError("industry is required")
        
        skill_list = normalize_skills(skills)
        context = {"industry": industry, "skills": SKILL_SEPARATOR.join(skill_list)}
        prompt = self.prompt_builder.render(
            QUIZ_TEMPLATE,
            {
                **context,
                "question_count": QUIZ_QUESTION_COUNT,
                "option_count": QUIZ_OPTION_COUNT,
            },
        )
        request = GenerationRequest(
            prompt=prompt,
            schema=QUIZ_SCHEMA,
            fallback=quiz_fallback,
            context=context,
            template_name=QUIZ_TEMPLATE,
        )
        return quiz_key(industry, skill_list), request
    
    def cover_letter(
        self,
        job_title: str,
        company_name: str,
        job_description: str,
        industry: str = "",
        experience: str = "",
        skills: Iterable[str] = (),
        bio: str = "",
        key: Optional[str] = None,
    ) -> tuple[str, GenerationRequest]:
        """
        Key and request for a markdown cover letter.
        
        The fallback is a generic letter populated from the same fields.
        """
        job_title = clean_text(job_title)
        company_name = clean_text(company_name)
        if not job_title or not company_name:
            raise InvalidRequestError("job_title and company_name are required")
        
        context = {
            "job_title": job_title,
            "company_name": company_name,
            "job_description": (job_description or "").strip(),
            "industry": clean_text(industry),
            "experience": clean_text(str(experience or "")),
            "skills": SKILL_SEPARATOR.join(normalize_skills(skills)),
            "bio": (bio or "").strip(),
        }
        max_words = self.settings.LETTER_SOFT_MAX_WORDS
        request = GenerationRequest(
            prompt=self.prompt_builder.render(
                COVER_LETTER_TEMPLATE, {**context, "max_words": max_words}
            ),
            schema=cover_letter_schema(max_words),
            fallback=self._letter_fallback,
            context=context,
            template_name=COVER_LETTER_TEMPLATE,
        )
        return key or cover_letter_key(company_name, job_title), request
    
    def improvement_tip(
        self, industry: str, wrong_answers: Iterable[Mapping[str, Any]]
    ) -> tuple[str, GenerationRequest]:
        """Key and request for a short tip based on a quiz's wrong answers."""
        industry = clean_text(industry)
        wrong_answers_text = format_wrong_answers(wrong_answers)
        if not industry or not wrong_answers_text:
            raise InvalidRequestError("industry and at least one wrong answer are required")
        
        context = {"industry": industry, "wrong_answers": wrong_answers_text}
        request = GenerationRequest(
            prompt=self.prompt_builder.render(IMPROVEMENT_TIP_TEMPLATE, context),
            schema=improvement_tip_schema(self.settings.TIP_SOFT_MAX_WORDS),
            fallback=improvement_tip_fallback,
            context=context,
            template_name=IMPROVEMENT_TIP_TEMPLATE,
        )
        return improvement_tip_key(industry, wrong_answers_text), request
    
    def rebuild(self, schema_name: str, context: Mapping[str, str]) -> GenerationRequest:
        """
        Recreate the request an artifact was generated from.
        
        Raises:
            InvalidRequestError: Unknown schema or incomplete context
        """
        try:
            if schema_name == INSIGHTS_SCHEMA_NAME:
                _, request = self.insights(context["industry"])
            elif schema_name == QUIZ_SCHEMA_NAME:
                skills = [s for s in context.get("skills", "").split(SKILL_SEPARATOR) if s]
                _, request = self.quiz(context["industry"], skills)
            elif schema_name == COVER_LETTER_SCHEMA_NAME:
                _, request = self.cover_letter(
                    job_title=context["job_title"],
                    company_name=context["company_name"],
                    job_description=context.get("job_description", ""),
                    industry=context.get("industry", ""),
                    experience=context.get("experience", ""),
                    skills=[s for s in context.get("skills", "").split(SKILL_SEPARATOR) if s],
                    bio=context.get("bio", ""),
                )
            elif schema_name == IMPROVEMENT_TIP_SCHEMA_NAME:
                context = {"industry": context["industry"], "wrong_answers": context["wrong_answers"]}
                request = GenerationRequest(
                    prompt=self.prompt_builder.render(IMPROVEMENT_TIP_TEMPLATE, context),
                    schema=improvement_tip_schema(self.settings.TIP_SOFT_MAX_WORDS),
                    fallback=improvement_tip_fallback,
                    context=context,
                    template_name=IMPROVEMENT_TIP_TEMPLATE,
                )
            else:
                raise InvalidRequestError(f"Unknown schema '{schema_name}'")
        except KeyError as e:
            raise InvalidRequestError(
                f"Stored context for '{schema_name}' lacks {e.args[0]!r}",
                {"schema_name": schema_name},
            ) from e
        
        logger.debug("Rebuilt generation request", schema=schema_name)
        return request
