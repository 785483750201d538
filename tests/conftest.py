"""
Pytest configuration and shared fixtures.
"""
import os
import sys
import pytest

# Add project root to path for imports
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if project_root not in sys.path:
    sys.path.insert(0, project_root)

from mboxcore.config import reset_settings


DEFAULT_DELIMITER_DATE = "Mon Jan  1 10:00:00 2024"


def build_message(
    message_id="m1@example.com",
    sender='"Alice Smith" <alice@example.com>',
    to="bob@example.com",
    subject="Hello",
    date="Mon, 01 Jan 2024 10:00:00 +0000",
    body="Hi Bob,\n\nSee you soon.\n",
    extra_headers=(),
    envelope="alice@example.com",
    delimiter_date=DEFAULT_DELIMITER_DATE,
    with_delimiter=True,
):
    """Build one mbox message as text. Header values set to None are omitted."""
    lines = []
    if with_delimiter:
        lines.append(f"From {envelope} {delimiter_date}")
    if message_id is not None:
        lines.append(f"Message-ID: <{message_id}>")
    if sender is not None:
        lines.append(f"From: {sender}")
    if to is not None:
        lines.append(f"To: {to}")
    if subject is not None:
        lines.append(f"Subject: {subject}")
    if date is not None:
        lines.append(f"Date: {date}")
    lines.extend(extra_headers)
    text = "\n".join(lines) + "\n\n" + body
    if not text.endswith("\n"):
        text += "\n"
    return text


def build_mbox(messages):
    """Join messages with the blank separator line mbox writers emit."""
    return "\n".join(messages)


@pytest.fixture(autouse=True)
def fresh_settings():
    """Every test starts from default settings (or its own env overrides)."""
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def message_builder():
    return build_message


@pytest.fixture
def mbox_builder():
    return build_mbox


@pytest.fixture
def write_mbox(tmp_path):
    """Write text (or bytes) into a fresh .mbox file and return its path."""
    counter = {"n": 0}

    def _write(content, name=None):
        counter["n"] += 1
        path = tmp_path / (name or f"archive_{counter['n']}.mbox")
        if isinstance(content, str):
            path.write_bytes(content.encode("utf-8"))
        else:
            path.write_bytes(content)
        return path

    return _write


@pytest.fixture
def two_message_mbox(write_mbox):
    """Message 1 has ``Subject: Hello``; message 2 has no Date header."""
    first = build_message()
    second = build_message(
        message_id="m2@example.com",
        sender="Bob <bob@example.com>",
        to="alice@example.com",
        subject="Re: Hello",
        date=None,
        body="Thanks Alice.\n",
        envelope="bob@example.com",
        delimiter_date="Tue Jan  2 11:00:00 2024",
    )
    return write_mbox(build_mbox([first, second]))


@pytest.fixture
def numbered_mbox(write_mbox):
    """Factory: an archive with *n* well-formed messages m0..m{n-1}."""

    def _make(n, body_lines=3):
        messages = []
        for i in range(n):
            body = "".join(f"Line {j} of message {i}.\n" for j in range(body_lines))
            messages.append(
                build_message(
                    message_id=f"m{i}@example.com",
                    subject=f"Message {i}",
                    date=f"Mon, 01 Jan 2024 10:{i % 60:02d}:00 +0000",
                    body=body,
                )
            )
        return write_mbox(build_mbox(messages))

    return _make
