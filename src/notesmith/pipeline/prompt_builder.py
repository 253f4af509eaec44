"""Prompt assembly for note refinement."""

from __future__ import annotations

from notesmith.models.settings import RefinerSettings

BASE_INSTRUCTIONS = """\
You are a helpful assistant that formats and improves Markdown notes.

Clean up the following note by:
- Fixing grammar, punctuation, and inconsistent structure
- Making the content easier to read and logically organized
- Applying proper Markdown formatting:
  - Use `#` or `##` or `###` or `####` for section headings where appropriate
  - Format lists using `-` or `1.` consistently
  - Convert any tasks into `[ ]` or `[x]` checkboxes
  - Preserve and reformat code blocks, blockquotes, and inline formatting correctly
  - Don't output the response in a code block. Parts of the note can be in code blocks, but the entire response should not be in a code block.
  - Avoid inserting a horizontal rule at the very beginning of the note (`---`) as it breaks rendering

Keep all important content, but reword or reformat for clarity where helpful."""

TAG_INSTRUCTION = (
    "If any content fits the following tags, add them where appropriate "
    "(e.g. headers, checklists). Tags are not limited to headers and can be "
    "placed at any point in the document: {tags}"
)

EXTRA_INSTRUCTIONS_MARKER = (
    "Here are additional instructions for how to modify the document. "
    "These are not part of the document:"
)

DOCUMENT_MARKER = "### Here is the contents of the document to edit:"


def build_prompt(body: str, settings: RefinerSettings) -> str:
    """Assemble the refine prompt for ``body``.

    Order is fixed: base rules, tag clause, additional instructions, then the
    document marker followed by the body verbatim.
    """
    parts = [BASE_INSTRUCTIONS]

    tags = settings.preferred_tags.strip()
    if tags:
        parts.append("- " + TAG_INSTRUCTION.format(tags=tags))

    if settings.extra_instructions.strip():
        parts.append(f"{EXTRA_INSTRUCTIONS_MARKER}\n{settings.extra_instructions}")

    parts.append(f"{DOCUMENT_MARKER}\n\n")
    return "\n\n".join(parts) + body
