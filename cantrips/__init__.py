"""
Cantrips
========

Interactive command-line helpers for smart-contract projects.

Structure:
- deployments/: deploy-everything module registry, resolution and runner
- tasks/: command-line tasks (generators, token helpers, transfers)
- ipfs/: local IPFS node with content auto-pinning
- utils/: input parsing, prompts, templates and artifacts
"""

__version__ = "1.0.0"
