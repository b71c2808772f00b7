"""
Commit Story - narrative context for git commits.

Correlates a commit with the Claude Code sessions that produced it and
distils the transcripts into a bounded, noise-free payload for narrative
generation.
"""

__version__ = "1.0.0"
