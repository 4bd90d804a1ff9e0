"""Scraper package: result page fetch, crawl & listing extraction."""

from ranking.scraper.crawler import CrawlOutcome, crawl
from ranking.scraper.extractor import extract_page, extract_results
from ranking.scraper.fetcher import fetch_page
from ranking.scraper.markup import GoogleMarkup, SerpMarkup

__all__ = [
    "crawl",
    "CrawlOutcome",
    "extract_page",
    "extract_results",
    "fetch_page",
    "GoogleMarkup",
    "SerpMarkup",
]
