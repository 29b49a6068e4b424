"""Serini risk triage and retrieval-augmented insight engine.

Service layout:
- assessment_service: instrument catalog, scoring engine, screening triage
- safety_service: deterministic crisis classifier and crisis resources
- retrieval_service: embeddings, vector retrieval, context composition
- llm_service: generative providers, insight validation, fallback, orchestrator
"""

__version__ = "0.1.0"
