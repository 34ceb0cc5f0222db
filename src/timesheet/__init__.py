"""Timesheet - personal project time tracking."""

__version__ = "0.1.0"
