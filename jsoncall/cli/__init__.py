"""CLI module for jsoncall."""
