"""Network layer: auth headers, request executor and endpoint client."""

from indexer_client.network.auth_headers import build_auth_headers, encode_uri_component
from indexer_client.network.client import IndexerClient
from indexer_client.network.executor import RequestExecutor

__all__ = [
    "IndexerClient",
    "RequestExecutor",
    "build_auth_headers",
    "encode_uri_component",
]
