"""Conversion orchestrator.

Sequences the activities of one spreadsheet-to-GeoJSON conversion.
"""
