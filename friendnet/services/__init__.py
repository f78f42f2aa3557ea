"""HTTP clients for calling the other friendnet services."""

from .exceptions import ConnectionFailed
from .util import Reply
