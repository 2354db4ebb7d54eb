"""Shared utilities: event log, usage accounting, retries and input validation."""
