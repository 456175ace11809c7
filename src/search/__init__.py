"""Search application layer.

- ``QueryInterpreter`` turns a natural-language query into a ``VectorQuery``
  (cleaned text, metadata filter, optional result count) with one LLM tool call.
- ``SearchService`` embeds the cleaned text, queries the company vector index
  and paginates the matches.
"""

from .interpreter import QueryInterpreter, VectorQuery
from .service import SearchService

__all__ = ["QueryInterpreter", "SearchService", "VectorQuery"]
