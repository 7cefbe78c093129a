"""
Shared helpers: input parsing, prompts, templates and compiled artifacts
"""
