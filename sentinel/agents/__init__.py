"""Stage executors for the analysis pipeline.

This package contains one executor per pipeline stage plus the post-run
agents:
- StageExecutor: Abstract base class for all stage executors
- RouterAgent: Classifies the analysis intent
- HunterAgent: Discovers source URLs
- ScraperAgent: Extracts content from discovered sources
- AnalystAgent: Produces the structured SWOT analysis
- ReporterAgent: Synthesizes the markdown report
- SocialPostAgent: Derives a short social post from a finished report
- AnalystChat: Follow-up conversation over a finished analysis
"""
