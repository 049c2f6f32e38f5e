"""Shared utilities for jsoncall."""
