"""Identity domain exports."""

from .service import get_by_username, get_user, login, me, register, search, username_available

__all__ = [
	"get_by_username",
	"get_user",
	"login",
	"me",
	"register",
	"search",
	"username_available",
]
