"""Feed domain exports."""

from .service import comment, create_post, like_post, list_friends_feed, list_user_posts

__all__ = [
	"comment",
	"create_post",
	"like_post",
	"list_friends_feed",
	"list_user_posts",
]
