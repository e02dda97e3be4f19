from typing import Any


# Type aliases for Python dictionaries
type LambdaEvent = dict[str, Any]
type LambdaContext = Any
type LambdaResponse = dict[str, Any]
type LambdaConfiguration = dict[str, Any]

# Raw (unvalidated) routing configuration as received in request bodies
type RawVariant = dict[str, Any]
type RawGeoRule = dict[str, Any]

# Serialized ShortURLModel document as stored in the data store
type ShortURLDocument = dict[str, Any]
