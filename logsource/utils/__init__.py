"""Shared utilities: structured logging and layered configuration."""
