"""Meetpoll: group meeting scheduling by availability consensus."""

__version__ = "1.0.0"
