"""Opportunity Hub backend API."""
