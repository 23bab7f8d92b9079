"""File readers for proposal documents."""
from parsers.document_reader import SUPPORTED_SUFFIXES, load_document_text

__all__ = ["SUPPORTED_SUFFIXES", "load_document_text"]
