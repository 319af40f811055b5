"""Monte-Log: personal blog backend.

Posts, categories, likes and visitor counting over a relational database,
with a Redis cache-aside layer in front of the hot reads.
"""

__version__ = "0.1.0"
