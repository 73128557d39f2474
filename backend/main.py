"""
Huddle - terminal client for direct messages, friends, games, a shared
chat room and a post feed.

Signs in against Supabase, then runs an interactive command loop. Direct
messages, friend requests and notification badges stay live through
Supabase Realtime while the prompt waits for input.
"""

import argparse
import asyncio
import logging
import mimetypes
import sys
from pathlib import Path
from typing import Optional

from rich.logging import RichHandler
from rich.markup import escape
from rich.prompt import Prompt

from core.display import (
    console,
    describe_message,
    print_toast,
    render_badges,
    render_board,
    render_chat,
    render_conversations,
    render_messages,
    render_posts,
    render_requests,
    render_rps,
)
from core.session import ConversationView, SocialSession
from modules.auth.exceptions import InvalidCredentialsError
from modules.auth.service import AuthService
from modules.chatroom import ChatMessage, ChatRoom
from modules.games.models import GameType, RpsChoice
from modules.games.rps import RpsState
from modules.games.tictactoe import TicTacToeState
from modules.messages.engine import MessageSyncEngine
from shared.config import get_settings
from shared.database import get_supabase_client

logger = logging.getLogger(__name__)

HELP = """\
[bold]Commands[/bold]
  /friends                 list conversations
  /open <n|username>       open a conversation
  /send <text>             send a message (plain text without / works too)
  /image <path> [caption]  send an image
  /show                    redraw the open conversation
  /ttt start|<cell>|resign play tic-tac-toe
  /rps start|rock|paper|scissors|resign
  /read                    mark every message as read
  /clear                   delete the open conversation
  /add <username>          send a friend request
  /requests                list pending requests
  /accept <id>, /reject <id>
  /chat                    open the shared chat room
  /say <text>              post a line to the chat room
  /posts                   show the post feed
  /post <text>             share a post
  /like <n>                like or unlike post n
  /comment <n> <text>      comment on post n
  /delete <n>              delete your post n
  /badges                  show notification counters
  /quit
"""


def setup_logging(level: str) -> None:
    """Route log records through rich so they do not garble the prompt."""
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )


def announce_new_messages(view: ConversationView) -> None:
    """Print peer messages as they arrive in the open conversation."""
    seen = {m.id for m in view.engine.messages}

    def on_change(engine: MessageSyncEngine) -> None:
        for message in engine.messages:
            if message.id in seen:
                continue
            seen.add(message.id)
            if message.sender_id == view.friend.id:
                console.print(f"[bold blue]{view.friend.display_name}:[/bold blue] {describe_message(message)}")

    view.engine.add_listener(on_change)


def announce_chat(room: ChatRoom) -> None:
    """Print chat lines from other people as they arrive."""
    seen = {m.id for m in room.messages}

    def on_change(messages: list[ChatMessage]) -> None:
        for message in messages:
            if message.id in seen:
                continue
            seen.add(message.id)
            if message.author_id != room.user_id:
                console.print(f"[bold cyan]#chat {escape(message.author_name)}:[/bold cyan] {escape(message.content)}")

    room.add_listener(on_change)


class CommandLoop:
    """Parses commands and runs them through SocialSession.guard()."""

    def __init__(self, session: SocialSession):
        self.session = session
        self._chat_announced = False

    async def run(self) -> None:
        console.print(HELP)
        while True:
            line = (await asyncio.to_thread(console.input, "[bold]> [/bold]")).strip()
            if not line:
                continue
            if line in ("/quit", "/exit"):
                return
            await self.dispatch(line)

    async def dispatch(self, line: str) -> None:
        if not line.startswith("/"):
            line = f"/send {line}"
        command, _, arg = line.partition(" ")
        arg = arg.strip()
        handler = getattr(self, f"cmd_{command[1:]}", None)
        if handler is None:
            print_toast("warning", f"Unknown command {command}. Try /help")
            return
        await handler(arg)

    async def cmd_help(self, arg: str) -> None:
        console.print(HELP)

    async def cmd_friends(self, arg: str) -> None:
        self.session.view_messages()
        console.print(render_conversations(self.session.conversations.conversations))

    async def cmd_open(self, arg: str) -> None:
        conversations = self.session.conversations.conversations
        friend = None
        if arg.isdigit() and 0 < int(arg) <= len(conversations):
            friend = conversations[int(arg) - 1].friend
        else:
            friend = next((c.friend for c in conversations if c.friend.username == arg), None)
        if friend is None:
            print_toast("warning", f"No friend {arg!r}")
            return
        view = await self.session.guard("Open conversation", self.session.open_conversation(friend))
        if view is not None:
            announce_new_messages(view)
            console.print(render_messages(view.engine.messages, self.session.self_id, friend))

    async def cmd_show(self, arg: str) -> None:
        view = self.session.view
        if view is None:
            print_toast("warning", "Open a conversation first")
            return
        await self.session.guard("Mark as read", view.engine.mark_read())
        console.print(render_messages(view.engine.messages, self.session.self_id, view.friend))

    async def cmd_send(self, arg: str) -> None:
        await self.session.guard("Send message", self.session.send_text(arg))

    async def cmd_image(self, arg: str) -> None:
        raw_path, _, caption = arg.partition(" ")
        path = Path(raw_path).expanduser()
        if not path.is_file():
            print_toast("warning", f"File not found: {path}")
            return
        content_type = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        await self.session.guard(
            "Send image",
            self.session.send_image(path.name, path.read_bytes(), content_type, caption.strip()),
        )

    async def cmd_ttt(self, arg: str) -> None:
        view = self.session.view
        if view is None:
            print_toast("warning", "Open a conversation first")
            return
        games = view.games
        if arg == "start":
            await self.session.guard("Start game", games.start(GameType.TICTACTOE))
        elif arg:
            state = games.current(GameType.TICTACTOE)
            if state is None:
                print_toast("warning", "No game yet. Use /ttt start")
                return
            if arg == "resign":
                await self.session.guard("Resign", games.resign(state.game_id))
            elif arg.isdigit():
                await self.session.guard("Move", games.move(state.game_id, int(arg)))
            else:
                print_toast("warning", "Use /ttt start, /ttt <cell 0-8> or /ttt resign")
                return
        state = games.current(GameType.TICTACTOE)
        if isinstance(state, TicTacToeState):
            console.print(render_board(state, self.session.self_id))

    async def cmd_rps(self, arg: str) -> None:
        view = self.session.view
        if view is None:
            print_toast("warning", "Open a conversation first")
            return
        games = view.games
        if arg == "start":
            await self.session.guard("Start game", games.start(GameType.RPS))
        elif arg:
            state = games.current(GameType.RPS)
            if state is None:
                print_toast("warning", "No game yet. Use /rps start")
                return
            if arg == "resign":
                await self.session.guard("Resign", games.resign(state.game_id))
            elif arg in {c.value for c in RpsChoice}:
                await self.session.guard("Choose", games.choose(state.game_id, RpsChoice(arg)))
            else:
                print_toast("warning", "Use /rps start, /rps rock|paper|scissors or /rps resign")
                return
        state = games.current(GameType.RPS)
        if isinstance(state, RpsState):
            console.print(render_rps(state, self.session.self_id))

    async def cmd_read(self, arg: str) -> None:
        changed = await self.session.guard("Mark messages as read", self.session.mark_all_read())
        if changed is not None:
            print_toast("info", f"Marked {changed} message(s) as read")

    async def cmd_clear(self, arg: str) -> None:
        view = self.session.view
        if view is None:
            print_toast("warning", "Open a conversation first")
            return
        await self.session.guard("Clear conversation", view.engine.clear_conversation())

    async def cmd_add(self, arg: str) -> None:
        request = await self.session.guard("Send friend request", self.session.add_friend(arg))
        if request is not None:
            print_toast("info", f"Friend request sent to {arg}")

    async def cmd_requests(self, arg: str) -> None:
        requests = await self.session.guard("Load friend requests", self.session.pending_requests())
        if requests is not None:
            console.print(render_requests(requests))

    async def cmd_accept(self, arg: str) -> None:
        if await self.session.guard("Accept request", self.session.respond(arg, accept=True)):
            print_toast("info", "Friend request accepted")

    async def cmd_reject(self, arg: str) -> None:
        if await self.session.guard("Reject request", self.session.respond(arg, accept=False)):
            print_toast("info", "Friend request rejected")

    async def cmd_chat(self, arg: str) -> None:
        room = await self.session.guard("Open chat room", self.session.open_chat())
        if room is not None:
            if not self._chat_announced:
                announce_chat(room)
                self._chat_announced = True
            console.print(render_chat(room.messages, self.session.self_id))

    async def cmd_say(self, arg: str) -> None:
        message = await self.session.guard("Send chat message", self.session.say(arg))
        if message is not None and self.session.chat is not None:
            console.print(render_chat(self.session.chat.messages, self.session.self_id))

    async def cmd_posts(self, arg: str) -> None:
        feed = await self.session.guard("Load posts", self.session.open_feed())
        if feed is not None:
            console.print(render_posts(feed.posts, self.session.self_id))

    async def cmd_post(self, arg: str) -> None:
        if await self.session.guard("Share post", self.session.share_post(arg)) is not None:
            print_toast("info", "Post shared")

    def post_id(self, number: str) -> Optional[str]:
        """Map a feed number from /posts to a post id."""
        posts = self.session.feed.posts if self.session.feed is not None else []
        if number.isdigit() and 0 < int(number) <= len(posts):
            return posts[int(number) - 1].id
        print_toast("warning", f"No post {number!r}. Use /posts to list them")
        return None

    async def cmd_like(self, arg: str) -> None:
        post_id = self.post_id(arg)
        if post_id is None:
            return
        liked = await self.session.guard("Like post", self.session.like_post(post_id))
        if liked is not None:
            print_toast("info", "Liked" if liked else "Like removed")

    async def cmd_comment(self, arg: str) -> None:
        number, _, text = arg.partition(" ")
        post_id = self.post_id(number)
        if post_id is None:
            return
        if await self.session.guard("Comment", self.session.comment_on(post_id, text)) is not None:
            print_toast("info", "Comment added")

    async def cmd_delete(self, arg: str) -> None:
        post_id = self.post_id(arg)
        if post_id is None:
            return
        await self.session.guard("Delete post", self.session.delete_post(post_id))
        if self.session.feed is not None:
            console.print(render_posts(self.session.feed.posts, self.session.self_id))

    async def cmd_badges(self, arg: str) -> None:
        console.print(render_badges(self.session.notifications.counts))


async def run(email: str, password: str) -> int:
    """Sign in, run the command loop, and tear everything down on exit.

    Returns:
        Process exit code
    """
    db = await get_supabase_client()
    auth = AuthService(db)
    try:
        auth_session = await auth.sign_in(email, password)
    except InvalidCredentialsError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        return 1

    session = SocialSession.connect(db, auth_session.user, toaster=print_toast)
    session.notifications.subscribe(lambda counts: console.print(render_badges(counts)))
    try:
        await session.guard("Start session", session.start())
        console.print(f"[bold]Signed in as[/bold] {session.profile.display_name if session.profile else email}")
        await CommandLoop(session).run()
    finally:
        await session.close()
        await auth.sign_out()
    return 0


def main(argv: Optional[list[str]] = None) -> None:
    settings = get_settings()
    parser = argparse.ArgumentParser(
        description="Terminal client for direct messages, friends, games, chat and posts"
    )
    parser.add_argument("--email", "-e", help="Account email (prompted if omitted)")
    parser.add_argument("--password", "-p", help="Account password (prompted if omitted)")
    parser.add_argument(
        "--log-level",
        default=settings.log_level,
        help=f"Logging level (default: {settings.log_level})",
    )
    args = parser.parse_args(argv)

    setup_logging("DEBUG" if settings.debug else args.log_level)
    email = args.email or Prompt.ask("Email", console=console)
    password = args.password or Prompt.ask("Password", password=True, console=console)

    try:
        code = asyncio.run(run(email, password))
    except RuntimeError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        code = 0
    sys.exit(code)


if __name__ == "__main__":
    main()
