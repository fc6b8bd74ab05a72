from .middleware import ResourcePipeline, resourcePipeline  # NOQA: F401
from .model import (  # NOQA: F401
	CacheEntry,
	ExactPattern,
	FileUnit,
	MiddlewareConfig,
	RegexPattern,
	Target,
)
from .pipeline import contents, each, where  # NOQA: F401
from .server import chain, run  # NOQA: F401

# EOF
