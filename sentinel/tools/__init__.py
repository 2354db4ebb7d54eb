"""Stateless tools used by the pipeline stages.

- web_search: source discovery through the Tavily search API
- scraper: page fetching and text extraction for discovered sources
"""
