"""Load OpenAPI v3 documents and resolve them into an API model."""

__version__ = "0.1.0"
__all__ = ["schema", "spec", "openapi", "otelogen", "path_parser", "parser"]