"""Shared utilities: logging, prompt templates, rate limiting, tracing."""
