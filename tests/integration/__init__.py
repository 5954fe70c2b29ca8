"""
Integration tests for the generation layer.

Components wired together:
- Redis artifact store and orchestrator against a real Redis (db 15,
  marked with @pytest.mark.integration, skipped when unreachable)
- HTTP endpoints through FastAPI's TestClient with a stub provider
"""
