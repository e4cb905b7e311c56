"""
Ticket Tagger.

Classifies support tickets against labeled examples by TF-IDF similarity
and tags them through the DevRev API.
"""

__version__ = "1.0.0"
