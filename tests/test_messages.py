"""Unit tests for notification text templates."""

import pytest

from mailbot.core.messages import format_attachment
from mailbot.core.models import Attachment


@pytest.mark.parametrize("size", [None, "", 0])
def test_attachment_without_size_shows_unknown(size) -> None:
    text = format_attachment(Attachment(filename="a.pdf", url="https://files.test/a.pdf", size=size))

    assert text == "📎 Attachment: a.pdf\nSize: unknown\nURL: https://files.test/a.pdf"
