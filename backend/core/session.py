"""
Application root for one signed-in user.

SocialSession is built at sign-in and torn down at sign-out. It owns the
notification center and the conversation index, plus the chat room, the
post feed and at most one conversation once they are opened. It is the
single place where failures of user actions are turned into toasts.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional, TypeVar

from supabase import AsyncClient

from shared.config import get_settings
from shared.exceptions import ConflictError, HuddleError, TransportError
from shared.models import AuthenticatedUser
from modules.attachments.service import AttachmentService
from modules.chatroom.interfaces import IChatStore
from modules.chatroom.models import ChatMessage
from modules.chatroom.repository import ChatRepository
from modules.chatroom.service import ChatRoom
from modules.conversations.service import ConversationIndex
from modules.friends.interfaces import IFriendsService
from modules.friends.models import FriendRequest, FriendRequestStatus
from modules.friends.repository import FriendRepository
from modules.friends.service import FriendsService
from modules.games.service import GameService
from modules.messages.engine import MessageSyncEngine
from modules.messages.interfaces import IMessageStore
from modules.messages.models import DirectMessage, MessagePayload
from modules.messages.repository import MessageRepository
from modules.notifications.interfaces import INotificationStore
from modules.notifications.models import NotificationCategory
from modules.notifications.repository import NotificationRepository
from modules.notifications.service import NotificationCenter
from modules.posts.interfaces import IPostStore
from modules.posts.models import Comment, Post
from modules.posts.repository import PostRepository
from modules.posts.service import PostFeed
from modules.profiles.models import Profile
from modules.profiles.repository import ProfileRepository
from modules.profiles.service import ProfileService
from modules.realtime.interfaces import IPushChannel
from modules.realtime.service import RealtimeService

logger = logging.getLogger(__name__)

T = TypeVar("T")

Toaster = Callable[[str, str], None]  # (level, message)


@dataclass
class ConversationView:
    """The open conversation: its engine and the games played in it."""

    friend: Profile
    engine: MessageSyncEngine
    games: GameService


class SocialSession:
    """Everything one signed-in user has open."""

    def __init__(
        self,
        user: AuthenticatedUser,
        profiles: ProfileService,
        friends: IFriendsService,
        messages: IMessageStore,
        notification_store: INotificationStore,
        realtime: IPushChannel,
        attachments: Optional[AttachmentService] = None,
        chat_store: Optional[IChatStore] = None,
        post_store: Optional[IPostStore] = None,
        toaster: Optional[Toaster] = None,
    ):
        self.user = user
        self.profiles = profiles
        self.friends = friends
        self.messages = messages
        self.realtime = realtime
        self.notifications = NotificationCenter(
            user.id, notification_store, realtime, on_error=self._on_transport_error
        )
        self.attachments = attachments
        self.conversations = ConversationIndex(user.id, friends, messages)
        self.view: Optional[ConversationView] = None
        self.chat_store = chat_store
        self.post_store = post_store
        self.chat: Optional[ChatRoom] = None
        self.feed: Optional[PostFeed] = None
        self.profile: Optional[Profile] = None
        self._toaster = toaster

    @classmethod
    def connect(
        cls,
        db: AsyncClient,
        user: AuthenticatedUser,
        toaster: Optional[Toaster] = None,
    ) -> "SocialSession":
        """Wire the Supabase-backed services for user."""
        profiles = ProfileService(ProfileRepository(db))
        friends = FriendsService(FriendRepository(db), profiles)
        realtime = RealtimeService(db)
        return cls(
            user=user,
            profiles=profiles,
            friends=friends,
            messages=MessageRepository(db),
            notification_store=NotificationRepository(db),
            realtime=realtime,
            attachments=AttachmentService(db),
            chat_store=ChatRepository(db),
            post_store=PostRepository(db),
            toaster=toaster,
        )

    @property
    def self_id(self) -> str:
        return self.user.id

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def start(self) -> None:
        """Resolve the profile, start the badges and load the conversation list."""
        self.profile = await self.profiles.get_or_create_profile(self.user)
        await self.notifications.start()
        await self.conversations.refresh()
        await self.conversations.listen(self.realtime, on_error=self._on_transport_error)
        logger.info("Session started for %s", self.profile.display_name)

    async def close(self) -> None:
        """Release every subscription. Called at sign-out."""
        await self.close_conversation()
        await self.close_chat()
        await self.close_feed()
        await self.conversations.close()
        await self.notifications.stop()
        close_all = getattr(self.realtime, "close_all", None)
        if close_all is not None:
            await close_all()
        logger.info("Session closed for %s", self.self_id)

    # -------------------------------------------------------------------------
    # Conversations
    # -------------------------------------------------------------------------

    async def open_conversation(self, friend: Profile) -> ConversationView:
        """
        Switch the open conversation to friend.

        The previous conversation's subscription is released before the
        new one is opened, so no message can land in the wrong log.
        """
        await self.close_conversation()
        engine = MessageSyncEngine(self.self_id, friend.id, self.messages)
        view = ConversationView(friend=friend, engine=engine, games=GameService(engine))
        self.view = view
        await engine.listen(self.realtime, on_error=self._on_transport_error)
        await engine.load_conversation()
        await engine.mark_read()
        return view

    async def close_conversation(self) -> None:
        if self.view is not None:
            view, self.view = self.view, None
            await view.engine.close()

    def require_view(self) -> ConversationView:
        if self.view is None:
            raise HuddleError("Open a conversation first", code="NO_CONVERSATION")
        return self.view

    async def send_text(self, text: str) -> DirectMessage:
        """Compose text into the draft and send it; the draft is emptied on send."""
        engine = self.require_view().engine
        engine.draft = MessagePayload(text=text)
        return await engine.send_draft()

    async def send_image(self, filename: str, data: bytes, content_type: str, caption: str = "") -> DirectMessage:
        """Upload an image, then send it with an optional caption."""
        view = self.require_view()
        if self.attachments is None:
            raise HuddleError("Attachments are not available", code="NO_STORAGE")
        stored = await self.attachments.upload_image(self.self_id, filename, data, content_type)
        return await view.engine.send_message(MessagePayload(text=caption, image_url=stored.url))

    async def send_voice(self, filename: str, data: bytes, content_type: str) -> DirectMessage:
        view = self.require_view()
        if self.attachments is None:
            raise HuddleError("Attachments are not available", code="NO_STORAGE")
        stored = await self.attachments.upload_voice(self.self_id, filename, data, content_type)
        return await view.engine.send_message(MessagePayload(voice_url=stored.url))

    async def mark_all_read(self) -> int:
        """
        Mark every unread direct message as read.

        The open conversation's log is updated too, so its next mark_read
        sees nothing unread and skips the write.
        """
        changed = await self.notifications.mark_messages_as_read()
        if self.view is not None:
            self.view.engine.note_read(datetime.now(timezone.utc))
        return changed

    def view_messages(self) -> None:
        """The message list is on screen; its badge is consumed."""
        self.notifications.clear(NotificationCategory.MESSAGES)

    # -------------------------------------------------------------------------
    # Chat room and post feed
    # -------------------------------------------------------------------------

    @property
    def author_name(self) -> str:
        if self.profile is not None and self.profile.username:
            return self.profile.username
        return self.user.handle

    async def open_chat(self) -> ChatRoom:
        """Join the shared room (once) and consume its badge."""
        if self.chat_store is None:
            raise HuddleError("The chat room is not available", code="NO_CHAT")
        if self.chat is None:
            settings = get_settings()
            room = ChatRoom(
                self.self_id,
                self.author_name,
                self.chat_store,
                max_length=settings.chat_max_length,
                history_limit=settings.chat_history_limit,
            )
            await room.listen(self.realtime, on_error=self._on_transport_error)
            self.chat = room
            await room.load()
        self.notifications.clear(NotificationCategory.CHAT)
        return self.chat

    async def close_chat(self) -> None:
        if self.chat is not None:
            room, self.chat = self.chat, None
            await room.close()

    async def say(self, text: str) -> ChatMessage:
        room = await self.open_chat()
        return await room.send(text)

    async def open_feed(self) -> PostFeed:
        """Load the post feed (subscribing once) and consume its badge."""
        if self.post_store is None:
            raise HuddleError("The post feed is not available", code="NO_FEED")
        if self.feed is None:
            settings = get_settings()
            feed = PostFeed(
                self.self_id,
                self.author_name,
                str(self.user.email),
                self.post_store,
                max_length=settings.post_max_length,
                limit=settings.feed_limit,
            )
            await feed.listen(self.realtime, on_error=self._on_transport_error)
            self.feed = feed
        await self.feed.refresh()
        self.notifications.clear(NotificationCategory.POSTS)
        return self.feed

    async def close_feed(self) -> None:
        if self.feed is not None:
            feed, self.feed = self.feed, None
            await feed.close()

    async def share_post(self, text: str) -> Post:
        feed = self.feed or await self.open_feed()
        return await feed.create(text)

    async def like_post(self, post_id: str) -> bool:
        feed = self.feed or await self.open_feed()
        return await feed.toggle_like(post_id)

    async def comment_on(self, post_id: str, text: str) -> Comment:
        feed = self.feed or await self.open_feed()
        return await feed.comment(post_id, text)

    async def delete_post(self, post_id: str) -> None:
        feed = self.feed or await self.open_feed()
        await feed.delete(post_id)

    # -------------------------------------------------------------------------
    # Friends
    # -------------------------------------------------------------------------

    async def add_friend(self, username: str) -> FriendRequest:
        return await self.friends.send_request(self.self_id, username)

    async def pending_requests(self) -> list[FriendRequest]:
        self.notifications.clear(NotificationCategory.FRIEND_REQUESTS)
        return await self.friends.list_pending(self.self_id)

    async def respond(self, request_id: str, accept: bool) -> FriendRequest:
        status = FriendRequestStatus.ACCEPTED if accept else FriendRequestStatus.REJECTED
        request = await self.friends.respond(self.self_id, request_id, status)
        if request.status == FriendRequestStatus.ACCEPTED:
            await self.conversations.on_friends_changed()
        return request

    # -------------------------------------------------------------------------
    # Failure reporting
    # -------------------------------------------------------------------------

    async def guard(self, action: str, operation: Awaitable[T]) -> Optional[T]:
        """
        Await a user action and turn any HuddleError into a toast.

        Returns None when the action failed.
        """
        try:
            return await operation
        except ConflictError as e:
            logger.info("%s conflicted: %s", action, e.message)
            self.toast("warning", e.message)
        except HuddleError as e:
            logger.warning("%s failed [%s]: %s", action, e.code, e.message)
            self.toast("error", f"{action} failed: {e.message}")
        return None

    def toast(self, level: str, message: str) -> None:
        if self._toaster is not None:
            self._toaster(level, message)

    def _on_transport_error(self, error: TransportError) -> None:
        if error.code == "RESUBSCRIBE_FAILED":
            self.toast("error", "Live updates stopped. Reopen the conversation to retry.")
        elif error.code == "RESYNC_FAILED":
            self.toast("error", "Reconnected, but some updates could not be loaded.")
        else:
            self.toast("warning", "Connection interrupted, reconnecting...")
