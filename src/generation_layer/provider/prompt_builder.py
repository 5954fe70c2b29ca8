"""
Prompt builder backed by Jinja2 templates.

Templates live in the packaged ``templates/`` directory unless a custom
directory is configured. Prompt templates and the fallback letter template
share one environment.
"""

from pathlib import Path
from typing import Any, Mapping, Optional

import structlog
from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateNotFound

logger = structlog.get_logger(__name__)

DEFAULT_TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"


class PromptBuilder:
    """
    Render prompts (and templated fallback text) from Jinja2 templates.
    
    Templates are loaded lazily by name and cached by Jinja2. Missing
    variables raise instead of rendering as empty strings so that a broken
    request fails loudly at construction time rather than producing a
    meaningless prompt.
    """
    
    def __init__(self, templates_dir: Optional[Path] = None):
        """
        Initialize prompt builder.
        
        Args:
            templates_dir: Directory containing *.j2 templates
                (default: packaged templates)
        """
        self.templates_dir = Path(templates_dir) if templates_dir else DEFAULT_TEMPLATES_DIR
        self.jinja_env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
            autoescape=False,  # prompts and markdown, not HTML
        )
        logger.info("PromptBuilder initialized", templates_dir=str(self.templates_dir))
    
    def render(self, template_name: str, context: Mapping[str, Any]) -> str:
        """
        Render ``template_name`` with ``context``.
        
        Raises:
            TemplateNotFound: Unknown template
            jinja2.UndefinedError: A variable used by the template is missing
        """
        try:
            template = self.jinja_env.get_template(template_name)
        except TemplateNotFound:
            logger.error(
                "Prompt template not found",
                template=template_name,
                templates_dir=str(self.templates_dir),
            )
            raise
        return template.render(**context).strip()
    
    def has_template(self, template_name: str) -> bool:
        return (self.templates_dir / template_name).is_file()
