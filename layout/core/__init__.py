"""Core rendering pipeline for layout."""
