from .boards  import boards_router
from .threads import threads_router
from .posts   import posts_router
from .mirror  import mirror_router

__all__ = [
    "boards_router", "threads_router", "posts_router",
    "mirror_router",   # toujours en dernier
]
