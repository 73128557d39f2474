"""Rich terminal UI components for conversations, games and badges."""

from typing import Optional

from rich.console import Console, Group
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from modules.chatroom.models import ChatMessage
from modules.conversations.models import Conversation
from modules.friends.models import FriendRequest
from modules.games.codec import decode_game_message
from modules.games.models import GameAction
from modules.games.rps import RpsState
from modules.games.tictactoe import TicTacToeState, TIE
from modules.messages.models import DirectMessage, MessageKind
from modules.notifications.models import NotificationCounts
from modules.posts.models import Post
from modules.profiles.models import Profile

console = Console()

TOAST_STYLES = {
    "info": "cyan",
    "warning": "yellow",
    "error": "red",
}


def format_time(item) -> str:
    """Local HH:MM of anything with a created_at."""
    return item.created_at.astimezone().strftime("%H:%M")


def truncate(text: str, limit: int = 40) -> str:
    """Shorten text for one-line previews."""
    text = " ".join(text.split())
    return text if len(text) <= limit else text[: limit - 3] + "..."


def describe_message(message: DirectMessage) -> str:
    """Human readable body of a message, including game events."""
    if message.kind == MessageKind.GAME_EVENT:
        event = decode_game_message(message)
        if event is None:
            return "[game]"
        payload = event.payload
        if payload.action == GameAction.START:
            return f"started a {payload.game_type.value} game"
        if payload.action == GameAction.MOVE:
            return f"played cell {payload.index}"
        if payload.action == GameAction.CHOICE:
            return "made a choice"
        return f"ended the game ({payload.outcome.value if payload.outcome else 'result'})"
    if message.kind == MessageKind.VOICE:
        return f"voice note {message.voice_url}"
    if message.kind == MessageKind.IMAGE:
        caption = f"{message.content} " if message.content else ""
        return f"{caption}[image {message.image_url}]"
    return message.content


def render_conversations(conversations: list[Conversation]) -> Table:
    """Conversation list, newest first."""
    table = Table(title="Conversations", expand=True)
    table.add_column("#", style="dim", width=3)
    table.add_column("Friend", style="bold")
    table.add_column("Last message")
    table.add_column("When", style="dim", justify="right")

    for number, conversation in enumerate(conversations, start=1):
        last = conversation.last_message
        table.add_row(
            str(number),
            conversation.friend.display_name,
            truncate(last.preview) if last else Text("No messages yet", style="dim italic"),
            format_time(last) if last else "",
        )
    return table


def render_messages(messages: list[DirectMessage], self_id: str, friend: Profile) -> Panel:
    """Message log of one conversation.

    Pending messages are dimmed; a check mark shows the friend has read
    one of ours.
    """
    lines: list[Text] = []
    for message in messages:
        mine = message.sender_id == self_id
        author = "You" if mine else friend.display_name
        line = Text()
        line.append(f"{format_time(message)} ", style="dim")
        line.append(f"{author}: ", style="bold green" if mine else "bold blue")
        line.append(describe_message(message), style="dim" if message.pending else "")
        if mine and message.is_read:
            line.append(" ✓", style="green")
        lines.append(line)

    body = Group(*lines) if lines else Text("Say hi!", style="dim italic")
    return Panel(body, title=friend.display_name, border_style="blue")


def render_chat(messages: list[ChatMessage], self_id: str) -> Panel:
    lines: list[Text] = []
    for message in messages:
        mine = message.author_id == self_id
        line = Text()
        line.append(f"{format_time(message)} ", style="dim")
        line.append(f"{message.author_name}: ", style="bold green" if mine else "bold cyan")
        line.append(message.content)
        lines.append(line)
    body = Group(*lines) if lines else Text("No messages yet. Start the conversation!", style="dim italic")
    return Panel(body, title="Chat room", border_style="cyan")


def render_posts(posts: list[Post], self_id: str, show_comments: bool = True) -> Group:
    """Post feed, newest first, numbered for /like, /comment and /delete."""
    if not posts:
        return Group(Text("No posts yet. Be the first to share something!", style="dim italic"))

    panels = []
    for number, post in enumerate(posts, start=1):
        likes = f"{post.like_count} like" + ("" if post.like_count == 1 else "s")
        if post.liked_by(self_id):
            likes += " (you)"
        lines = [Text(post.content), Text(f"{likes}, {len(post.comments)} comments", style="dim")]
        if show_comments:
            for comment in post.comments:
                line = Text("  ")
                line.append(f"{comment.author_name}: ", style="bold")
                line.append(comment.content)
                lines.append(line)
        title = f"#{number} {escape(post.author_name)} {format_time(post)}"
        panels.append(Panel(Group(*lines), title=title, title_align="left", border_style="green" if post.owned_by(self_id) else "white"))
    return Group(*panels)


def render_board(state: TicTacToeState, self_id: str) -> Panel:
    """3x3 tic-tac-toe board with cell numbers in empty squares."""
    grid = Table.grid(padding=(0, 2))
    for _ in range(3):
        grid.add_column(justify="center", width=3)
    for row in range(3):
        cells = []
        for col in range(3):
            index = row * 3 + col
            mark = state.board[index]
            cells.append(Text(mark, style="bold") if mark else Text(str(index), style="dim"))
        grid.add_row(*cells)

    if state.result == TIE:
        status = "It's a tie!"
    elif state.result:
        status = "You won!" if state.winner_id == self_id else "Your friend won!"
        if state.resigned_by:
            status += " (resignation)"
    elif state.turn_of(self_id):
        status = f"Your turn ({state.current})"
    else:
        status = "Waiting for your friend..."

    return Panel(Group(grid, Text(status, style="italic")), title="Tic-tac-toe", border_style="magenta")


def render_rps(state: RpsState, self_id: str) -> Panel:
    """Rock-paper-scissors scoreboard and last round."""
    other = state.other(self_id)
    lines = [Text(f"You {state.score_of(self_id)} - {state.score_of(other)} Friend", style="bold")]

    last = state.last_round
    if last is not None:
        mine_first = self_id == state.first_player
        mine = last.first_choice if mine_first else last.second_choice
        theirs = last.second_choice if mine_first else last.first_choice
        lines.append(Text(f"Last round: {mine.value} vs {theirs.value}", style="dim"))

    if state.is_over:
        lines.append(Text("You won the match!" if state.winner_id == self_id else "Your friend won the match!"))
    elif state.has_chosen(self_id):
        lines.append(Text("Waiting for your friend to choose...", style="italic"))
    else:
        lines.append(Text(f"Round {state.round_number}: choose rock, paper or scissors", style="italic"))

    return Panel(Group(*lines), title="Rock Paper Scissors", border_style="magenta")


def render_requests(requests: list[FriendRequest]) -> Table:
    table = Table(title="Friend requests")
    table.add_column("ID", style="dim")
    table.add_column("From", style="bold")
    for request in requests:
        sender = request.sender.display_name if request.sender else request.sender_id
        table.add_row(request.id, sender)
    return table


def render_badges(counts: NotificationCounts) -> Text:
    """One-line badge bar; zero counters are dimmed."""
    parts = [
        ("Messages", counts.messages),
        ("Requests", counts.friend_requests),
        ("Posts", counts.posts),
        ("Chat", counts.chat),
    ]
    text = Text()
    for label, count in parts:
        style = "bold red" if count else "dim"
        text.append(f" {label} {count} ", style=style)
    return text


def print_toast(level: str, message: str, target: Optional[Console] = None) -> None:
    style = TOAST_STYLES.get(level, "white")
    (target or console).print(f"[{style}]{level.upper()}:[/{style}] {escape(message)}")
