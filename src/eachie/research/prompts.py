"""Prompt construction for research and synthesis calls."""

from __future__ import annotations

from collections.abc import Sequence

from eachie.llm.messages import MessageBuilder, system_message
from eachie.llm.registry import ModelSpec
from eachie.llm.schemas import Message
from eachie.research.schemas import Attachment, AttachmentType, ModelCallResult

RESEARCH_SYSTEM_PROMPT = """\
You are an expert research assistant with built-in web search.

GUIDELINES:
- Search the web for current information when relevant
- Provide thorough, well-reasoned answers with citations
- Be direct and confident - ground your response in facts
- Structure responses clearly

FORMAT:
- 400-600 words
- Use markdown: ## headers, **bold**, bullets
- Cite web sources when using current data
- End with practical takeaways"""

DEFAULT_SYNTHESIS_PROMPT = """\
Create a synthesis that:
1. Identifies key consensus points
2. Highlights disagreements or unique insights
3. Provides actionable takeaways

Guidelines:
- 300-500 words, use markdown formatting
- Be substantive and specific"""

# Echoed query is cut to keep the synthesis prompt compact.
SYNTHESIS_QUERY_MAX_CHARS = 200

RESPONSE_SEPARATOR = "\n\n---\n\n"


def _by_type(
    attachments: Sequence[Attachment], kind: AttachmentType
) -> list[Attachment]:
    return [a for a in attachments if a.type == kind]


def enhance_query(query: str, attachments: Sequence[Attachment]) -> str:
    """Append text attachments to the query (readable by every model)."""
    texts = _by_type(attachments, AttachmentType.TEXT)
    if not texts:
        return query
    blocks = "\n\n".join(f"--- {a.name} ---\n{a.content}" for a in texts)
    return f"{query}\n\n[Attached Files]\n{blocks}"


def unreadable_notes(spec: ModelSpec, attachments: Sequence[Attachment]) -> list[str]:
    """Plain-text notes for attachments this model cannot receive."""
    notes: list[str] = []
    images = _by_type(attachments, AttachmentType.IMAGE)
    if images and not spec.supports_vision:
        notes.append(
            f"[Note: {len(images)} image(s) attached but not visible to this model]"
        )
    pdfs = _by_type(attachments, AttachmentType.PDF)
    if pdfs and not spec.supports_documents:
        notes.append(
            f"[Note: {len(pdfs)} document(s) attached but not readable by this model]"
        )
    return notes


def build_model_messages(
    spec: ModelSpec,
    query: str,
    attachments: Sequence[Attachment] = (),
) -> list[Message]:
    """System prompt + user message tailored to one model's capabilities."""
    query_text = "\n\n".join(
        [*unreadable_notes(spec, attachments), enhance_query(query, attachments)]
    )

    builder = MessageBuilder("user").text(query_text)
    if spec.supports_vision:
        for image in _by_type(attachments, AttachmentType.IMAGE):
            builder.image(image.mime_type, image.content)
    if spec.supports_documents:
        for pdf in _by_type(attachments, AttachmentType.PDF):
            builder.file(pdf.mime_type, pdf.content, pdf.name)

    return [system_message(RESEARCH_SYSTEM_PROMPT), builder.build()]


def build_synthesis_prompt(
    query: str,
    responses: Sequence[ModelCallResult],
    instruction: str | None = None,
) -> str:
    """Fold successful responses into one synthesis prompt.

    Failed responses are skipped even if passed in.
    """
    block = RESPONSE_SEPARATOR.join(
        f"### {r.model}\n{r.content}" for r in responses if r.success
    )
    directive = instruction or DEFAULT_SYNTHESIS_PROMPT
    return (
        f'Synthesize these AI model responses to: "{query[:SYNTHESIS_QUERY_MAX_CHARS]}"'
        f"\n\n{block}\n\n{directive}"
    )
