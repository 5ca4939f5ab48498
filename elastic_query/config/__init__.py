"""
Configuration management for elastic_query.
"""

from .environments import (
    get_elasticsearch_config,
    get_default_timeout,
    get_max_page_size,
)

__all__ = [
    "get_elasticsearch_config",
    "get_default_timeout",
    "get_max_page_size",
]
