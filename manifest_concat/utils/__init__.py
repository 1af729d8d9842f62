"""Utility helpers for HTTP, URLs, codecs and output."""

from .http_client import HttpClient, HttpResponse
from .url_utils import infer_mime_type, resolve_url

__all__ = ["HttpClient", "HttpResponse", "infer_mime_type", "resolve_url"]
