from sitesmith.db.base import Base  # noqa: F401

from .message import MessageRecord  # noqa: F401
