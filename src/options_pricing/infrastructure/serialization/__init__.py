from .json_serializer import CURRENT_SCHEMA_VERSION, JsonSerializer

__all__ = ["CURRENT_SCHEMA_VERSION", "JsonSerializer"]
