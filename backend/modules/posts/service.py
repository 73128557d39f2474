"""
Post feed.

The feed is re-read from the store whenever a post, like or comment
changes anywhere. Pushes that land while a re-read is already running
are folded into a single follow-up re-read.
"""

import asyncio
import logging
from typing import Callable, Optional

from shared.exceptions import HuddleError, TransportError
from modules.realtime.interfaces import IPushChannel, ISubscription, ErrorHandler
from modules.realtime.models import ChangeBinding, ChangeEvent

from .exceptions import EmptyPostError, PostAccessDeniedError, PostNotFoundError, PostTooLongError
from .interfaces import IPostStore
from .models import Comment, Post

logger = logging.getLogger(__name__)

Listener = Callable[[list[Post]], None]

FEED_TABLES = ("posts", "likes", "comments")


class PostFeed:
    """Newest posts for one signed-in user, with like and comment actions."""

    def __init__(
        self,
        user_id: str,
        author_name: str,
        author_email: str,
        store: IPostStore,
        max_length: int = 1000,
        limit: int = 50,
    ):
        self.user_id = user_id
        self.author_name = author_name
        self.author_email = author_email
        self._store = store
        self._max_length = max_length
        self._limit = limit
        self._posts: list[Post] = []
        self._listeners: list[Listener] = []
        self._subscription: Optional[ISubscription] = None
        self._refresh_task: Optional[asyncio.Task] = None
        self._stale = False
        self._on_error: Optional[ErrorHandler] = None

    @property
    def posts(self) -> list[Post]:
        return list(self._posts)

    def get(self, post_id: str) -> Post:
        for post in self._posts:
            if post.id == post_id:
                return post
        raise PostNotFoundError(post_id)

    def add_listener(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    async def refresh(self) -> list[Post]:
        self._posts = await self._store.list_feed(self._limit)
        for listener in list(self._listeners):
            listener(self.posts)
        return self.posts

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def _validated(self, text: str, what: str) -> str:
        content = text.strip()
        if not content:
            raise EmptyPostError(what)
        if len(content) > self._max_length:
            raise PostTooLongError(len(content), self._max_length)
        return content

    async def create(self, text: str) -> Post:
        content = self._validated(text, "post")
        post = await self._store.create_post(self.user_id, self.author_name, self.author_email, content)
        await self.refresh()
        return post

    async def toggle_like(self, post_id: str) -> bool:
        """Like or unlike a post. Returns whether the user now likes it."""
        post = self.get(post_id)
        if post.liked_by(self.user_id):
            await self._store.unlike(post_id, self.user_id)
            liked = False
        else:
            await self._store.like(post_id, self.user_id)
            liked = True
        await self.refresh()
        return liked

    async def comment(self, post_id: str, text: str) -> Comment:
        self.get(post_id)
        content = self._validated(text, "comment")
        comment = await self._store.add_comment(post_id, self.user_id, self.author_name, content)
        await self.refresh()
        return comment

    async def delete(self, post_id: str) -> None:
        """Delete one of the user's own posts."""
        post = self.get(post_id)
        if not post.owned_by(self.user_id):
            raise PostAccessDeniedError(post_id, self.user_id)
        await self._store.delete_post(post_id, self.user_id)
        await self.refresh()

    # -------------------------------------------------------------------------
    # Push
    # -------------------------------------------------------------------------

    async def listen(self, channel: IPushChannel, on_error: Optional[ErrorHandler] = None) -> None:
        await self.close()
        self._on_error = on_error
        self._subscription = await channel.subscribe(
            "post-feed",
            [ChangeBinding(table=table) for table in FEED_TABLES],
            self._on_event,
            on_resync=self.refresh,
            on_error=on_error,
        )

    def _on_event(self, event: ChangeEvent) -> None:
        if event.table not in FEED_TABLES:
            return
        if self._refresh_task is not None and not self._refresh_task.done():
            self._stale = True
            return
        self._refresh_task = asyncio.get_running_loop().create_task(self._refresh_from_push())

    async def _refresh_from_push(self) -> None:
        while True:
            self._stale = False
            try:
                await self.refresh()
            except HuddleError as e:
                failure = TransportError(
                    f"Feed update failed: {e.message}",
                    code="RESYNC_FAILED",
                    details={"topic": "post-feed", "cause": e.code},
                )
                logger.warning(failure.message)
                if self._on_error is not None:
                    self._on_error(failure)
                return
            if not self._stale:
                return

    async def close(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        if self._subscription is not None:
            subscription, self._subscription = self._subscription, None
            await subscription.close()

    @property
    def listening(self) -> bool:
        return self._subscription is not None and not self._subscription.closed
