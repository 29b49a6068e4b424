"""Serini engine services.

Every request passes the crisis gate (safety_service) before any
retrieval or model call (retrieval_service, llm_service).
"""
