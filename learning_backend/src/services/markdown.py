import html
import re
from typing import List

_CODE_FENCE_REGEX = re.compile(r"```[^\n`]*\n?(.*?)```", re.DOTALL)
_HEADING_REGEX = re.compile(r"^(#{1,3}) (.*)$")
_BOLD_REGEX = re.compile(r"\*\*(.+?)\*\*")

# Stand-in line for an extracted code block while the surrounding text is processed.
_CODE_TOKEN = "\x00code{}\x00"
_CODE_TOKEN_REGEX = re.compile(r"\x00code(\d+)\x00")


def _format_inline(text: str) -> str:
    return _BOLD_REGEX.sub(r"<strong>\1</strong>", html.escape(text, quote=False))


# PUBLIC_INTERFACE
def markdown_to_html(markdown: str) -> str:
    """
    Render the small subset of Markdown the notes use into HTML.

    Supported: fenced code blocks, #/##/### headings, **bold** and blank-line
    separated paragraphs. Headings and code blocks are emitted as their own
    blocks, never inside <p>. All other text is HTML-escaped, so model output
    cannot inject markup.
    """
    if not markdown:
        return ""

    code_blocks: List[str] = []

    def _stash(match: "re.Match") -> str:
        code_blocks.append(f"<pre><code>{html.escape(match.group(1), quote=False)}</code></pre>")
        return "\n" + _CODE_TOKEN.format(len(code_blocks) - 1) + "\n"

    out: List[str] = []
    paragraph: List[str] = []

    def _flush() -> None:
        if paragraph:
            out.append("<p>" + "\n".join(paragraph) + "</p>")
            paragraph.clear()

    for line in _CODE_FENCE_REGEX.sub(_stash, markdown).split("\n"):
        if not line.strip():
            _flush()
            continue
        code = _CODE_TOKEN_REGEX.fullmatch(line.strip())
        if code:
            _flush()
            out.append(code_blocks[int(code.group(1))])
            continue
        heading = _HEADING_REGEX.match(line)
        if heading:
            _flush()
            level = len(heading.group(1))
            out.append(f"<h{level}>{_format_inline(heading.group(2))}</h{level}>")
            continue
        paragraph.append(_format_inline(line))
    _flush()
    return "\n".join(out)
