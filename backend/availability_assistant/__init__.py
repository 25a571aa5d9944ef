"""Availability Assistant: booking webhook backed by an LLM time normalizer and Cal.com."""
