from docsearch.clients.elasticsearch.client import ElasticsearchClient

__all__ = ["ElasticsearchClient"]
