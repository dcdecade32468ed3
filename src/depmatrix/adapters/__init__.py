"""Adapters bringing external claim sources into the pipeline."""
