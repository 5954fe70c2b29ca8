"""
Generation cache layer for AI career-assistance content.

Serves career content (industry insights, interview quizzes,
cover letters, improvement tips) generated by an external LLM provider:
- Cache-aside lookups against a persistent artifact store
- Single-flight de-duplication of concurrent generations per key
- Retry with exponential backoff on transient provider failures
- Multi-strategy parsing and schema coercion of provider output
- Deterministic fallback content when the provider is unusable

Architecture: FastAPI surface + Orchestrator + Gemini client + Redis store
"""

__version__ = "0.1.0"
