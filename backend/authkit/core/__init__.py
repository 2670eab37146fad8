"""Application core: configuration, extensions, logging and error handling."""
