"""Helpers shared by the stage executors."""
