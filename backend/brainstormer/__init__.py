"""Idea brainstorming backend: idea gate, refinement chat and wrinkle scoring."""

__version__ = "0.1.0"
