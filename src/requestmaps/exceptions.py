class RequestMapsError(Exception):
    """Base exception for requestmaps"""
    pass

class DataLoadError(RequestMapsError):
    """Raised when a vector file is missing, unreadable or malformed"""
    pass

class GeometryTypeError(RequestMapsError):
    """Raised when an operation receives the wrong kind of geometry"""
    pass

class SampleSizeError(RequestMapsError):
    """Raised when a sample is larger than the rows available"""
    pass

class DataSchemaError(RequestMapsError):
    """Raised when data does not match expected schema"""
    pass

class CRSMismatchError(RequestMapsError):
    """Raised when layers of one figure use different coordinate reference systems"""
    pass
