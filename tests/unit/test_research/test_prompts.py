"""Tests for research and synthesis prompt construction."""

from eachie.llm.registry import ModelSpec
from eachie.llm.schemas import FilePart, ImagePart
from eachie.research.prompts import (
    DEFAULT_SYNTHESIS_PROMPT,
    RESEARCH_SYSTEM_PROMPT,
    build_model_messages,
    build_synthesis_prompt,
    enhance_query,
)
from eachie.research.schemas import Attachment, AttachmentType, ModelCallResult

IMAGE = Attachment(
    name="a.png",
    type=AttachmentType.IMAGE,
    mime_type="image/png",
    content="AAAA",
)
PDF = Attachment(
    name="paper.pdf",
    type=AttachmentType.PDF,
    mime_type="application/pdf",
    content="BBBB",
)
NOTES = Attachment(
    name="notes.txt",
    type=AttachmentType.TEXT,
    mime_type="text/plain",
    content="line one",
)


def _spec(**kwargs: object) -> ModelSpec:
    return ModelSpec(model_id="vendor/m", name="M", provider="V", **kwargs)  # type: ignore[arg-type]


def _ok(name: str, content: str) -> ModelCallResult:
    return ModelCallResult(model=name, model_id=name, content=content, success=True)


class TestEnhanceQuery:
    def test_no_text_attachments(self) -> None:
        assert enhance_query("q", [IMAGE, PDF]) == "q"

    def test_text_attachments_appended(self) -> None:
        assert enhance_query("q", [NOTES]) == (
            "q\n\n[Attached Files]\n--- notes.txt ---\nline one"
        )


class TestBuildModelMessages:
    def test_system_then_user(self) -> None:
        system, user = build_model_messages(_spec(), "what?")
        assert system.role == "system"
        assert system.text == RESEARCH_SYSTEM_PROMPT
        assert user.role == "user"
        assert user.text == "what?"
        assert user.is_text_only

    def test_image_note_for_non_vision_model(self) -> None:
        """Prompt starts with the unreadable-image note, then the query."""
        _, user = build_model_messages(_spec(), "what?", [IMAGE, IMAGE])
        assert user.text.startswith(
            "[Note: 2 image(s) attached but not visible to this model]"
        )
        assert user.text.endswith("\n\nwhat?")
        assert not any(isinstance(p, ImagePart) for p in user.parts)

    def test_vision_model_gets_images(self) -> None:
        _, user = build_model_messages(_spec(supports_vision=True), "what?", [IMAGE])
        assert user.text == "what?"
        images = [p for p in user.parts if isinstance(p, ImagePart)]
        assert [p.data_uri for p in images] == ["data:image/png;base64,AAAA"]

    def test_pdf_attached_by_default(self) -> None:
        _, user = build_model_messages(_spec(), "q", [PDF])
        files = [p for p in user.parts if isinstance(p, FilePart)]
        assert len(files) == 1
        assert files[0].filename == "paper.pdf"

    def test_pdf_note_when_documents_unsupported(self) -> None:
        _, user = build_model_messages(_spec(supports_documents=False), "q", [PDF])
        assert user.text.startswith(
            "[Note: 1 document(s) attached but not readable by this model]"
        )
        assert not any(isinstance(p, FilePart) for p in user.parts)

    def test_text_attachment_reaches_every_model(self) -> None:
        _, user = build_model_messages(_spec(), "q", [NOTES])
        assert "--- notes.txt ---\nline one" in user.text


class TestBuildSynthesisPrompt:
    def test_format(self) -> None:
        prompt = build_synthesis_prompt("why?", [_ok("A", "alpha"), _ok("B", "beta")])
        assert prompt.startswith('Synthesize these AI model responses to: "why?"')
        assert "### A\nalpha\n\n---\n\n### B\nbeta" in prompt
        assert prompt.endswith(DEFAULT_SYNTHESIS_PROMPT)

    def test_failed_responses_excluded(self) -> None:
        failed = ModelCallResult(
            model="Broken",
            model_id="vendor/broken",
            success=False,
            error="rate limit exceeded",
        )
        prompt = build_synthesis_prompt("q", [_ok("A", "alpha"), failed])
        assert "Broken" not in prompt
        assert "rate limit" not in prompt

    def test_query_truncated(self) -> None:
        prompt = build_synthesis_prompt("x" * 500, [_ok("A", "a")])
        assert f'"{"x" * 200}"' in prompt
        assert "x" * 201 not in prompt

    def test_custom_instruction(self) -> None:
        prompt = build_synthesis_prompt("q", [_ok("A", "a")], "Be brief.")
        assert prompt.endswith("Be brief.")
        assert DEFAULT_SYNTHESIS_PROMPT not in prompt
