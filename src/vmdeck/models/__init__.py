"""Pydantic models for manifests, deployment state and cloud values."""
