"""Sentinel Competitive Intelligence.

A five-stage research workflow (Router, Hunter, Scraper, Analyst, Reporter)
orchestrated with LangGraph, with run history, head-to-head comparison and
usage observability.
"""

__version__ = "1.0.0"
