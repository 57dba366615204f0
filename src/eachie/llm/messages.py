"""Typed builder for prompt messages."""

from __future__ import annotations

from typing import Literal, Self

from eachie.llm.schemas import FilePart, ImagePart, Message, Part, TextPart


def data_uri(mime_type: str, base64_data: str) -> str:
    return f"data:{mime_type};base64,{base64_data}"


class MessageBuilder:
    """Accumulate parts for one message.

    Example::

        message = (
            MessageBuilder("user")
            .text("What is on this picture?")
            .image("image/png", b64)
            .build()
        )
    """

    def __init__(self, role: Literal["system", "user", "assistant"] = "user") -> None:
        self._role: Literal["system", "user", "assistant"] = role
        self._parts: list[Part] = []

    def text(self, text: str) -> Self:
        self._parts.append(TextPart(text=text))
        return self

    def image(self, mime_type: str, base64_data: str) -> Self:
        self._parts.append(ImagePart(data_uri=data_uri(mime_type, base64_data)))
        return self

    def file(
        self,
        mime_type: str,
        base64_data: str,
        filename: str = "document.pdf",
    ) -> Self:
        self._parts.append(
            FilePart(
                data_uri=data_uri(mime_type, base64_data),
                mime_type=mime_type,
                filename=filename,
            )
        )
        return self

    def build(self) -> Message:
        """Build the message.

        Raises:
            ValueError: if no parts were added.
        """
        if not self._parts:
            raise ValueError("Message must have at least one part")
        return Message(role=self._role, parts=list(self._parts))


def system_message(text: str) -> Message:
    return MessageBuilder("system").text(text).build()


def user_message(text: str) -> Message:
    return MessageBuilder("user").text(text).build()
