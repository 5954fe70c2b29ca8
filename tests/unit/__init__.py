"""
Unit tests for the generation layer.

Test individual components in isolation:
- Data models and response schemas
- Gemini client (httpx.MockTransport) and retry policy
- Validation stages (extract, coerce, conformance)
- Fallback synthesis and artifact stores
- Orchestrator (scripted provider, in-memory store, movable clock)
"""
