import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from dulwich.objects import Commit

logger = logging.getLogger(__name__)

_identity_re = re.compile(r"^(.*?)\s*<(.*?)>\s*$")


def split_identity(identity: str) -> tuple[str, str]:
    """Split ``"Jane Doe <jane@example.com>"`` into name and email."""
    match = _identity_re.match(identity)
    if match:
        return match.group(1).strip(), match.group(2).strip()
    return identity.strip(), ""


def commit_encoding(commit: Commit) -> str:
    return commit.encoding.decode("ascii") if commit.encoding else "utf-8"


def decode_text(data: bytes, encoding: str = "utf-8") -> str:
    try:
        return data.decode(encoding, errors="replace")
    except LookupError:
        return data.decode("utf-8", errors="replace")


def commit_datetime(timestamp: int, offset: int) -> datetime:
    """Local time of a commit; offsets Python cannot represent fall back to UTC."""
    try:
        tz = timezone(timedelta(seconds=offset))
    except ValueError:
        logger.debug("timezone offset %d out of range, using UTC", offset)
        tz = timezone.utc
    return datetime.fromtimestamp(timestamp, tz)


def author_datetime(commit: Commit) -> datetime:
    return commit_datetime(commit.author_time, commit.author_timezone)


@dataclass
class CommitView:
    sha: str
    short_hash: str
    subject: str
    message: str
    author_name: str
    author_email: str
    author_date: datetime
    committer_date: datetime
    parents: list[str]

    @property
    def formatted_date(self) -> str:
        return self.author_date.strftime("%Y-%m-%d")


def parse_commit(commit: Commit) -> CommitView:
    encoding = commit_encoding(commit)
    message = decode_text(commit.message, encoding)
    name, email = split_identity(decode_text(commit.author, encoding))
    sha = commit.id.decode("ascii")
    return CommitView(
        sha=sha,
        short_hash=sha[:8],
        subject=message.split("\n", 1)[0],
        message=message,
        author_name=name,
        author_email=email,
        author_date=author_datetime(commit),
        committer_date=commit_datetime(commit.commit_time, commit.commit_timezone),
        parents=[parent.decode("ascii") for parent in commit.parents],
    )
