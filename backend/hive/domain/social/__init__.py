"""Social domain exports."""

from . import audit, policy, service  # noqa: F401
from .models import Friendship, FriendshipStatus  # noqa: F401
from .schemas import FriendRequestNotice, FriendshipSummary, PendingFriendRequest  # noqa: F401
