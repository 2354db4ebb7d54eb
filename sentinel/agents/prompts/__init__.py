"""System prompts for the LLM-backed agents."""
