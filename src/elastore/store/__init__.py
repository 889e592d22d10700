"""Store layer — Connection, index handles and index administration.

Built-in stores:
  - elastic: Elasticsearch-compatible engines through ``opensearch-py``

Implement ``Store`` to plug in another backend.
"""
