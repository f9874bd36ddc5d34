"""Webpage analyzer form — validate a URL, submit it, render the summary."""

from webanalyzer.client import AnalyzerError, ServerError, TransportError, analyze_url
from webanalyzer.form import AnalyzerForm
from webanalyzer.models import AnalysisResult, Failed, Idle, Submitting, Succeeded
from webanalyzer.render import render, render_html, render_text
from webanalyzer.validation import is_analyzable_url

__all__ = [
    "AnalyzerForm",
    "AnalysisResult",
    "AnalyzerError",
    "ServerError",
    "TransportError",
    "analyze_url",
    "is_analyzable_url",
    "render",
    "render_text",
    "render_html",
    "Idle",
    "Submitting",
    "Succeeded",
    "Failed",
]
