"""Extract documented Lua functions from the reference wiki table."""

import logging
import re
from collections.abc import Iterator

from playwright.async_api import Page

from lua_api_annotator.models import GLOBAL_NAMESPACE, FunctionRecord, Parameter
from lua_api_annotator.page_loader import ReferencePageError

logger = logging.getLogger(__name__)

TABLE_SELECTOR = "#xwikicontent > table"

SIGNATURE_PATTERN = re.compile(r"(\w+)\s*\((.*?)\)")
RETURN_TYPE_PATTERN = re.compile(r"^(\w+)\s+")
OPTIONAL_COMMA_PATTERN = re.compile(r"\[\s*,\s*")
EMPHASIS_PATTERN = re.compile(r"^[*_]*|[*_]*$")


async def extract_reference_rows(page: Page) -> list[tuple[str, str, str]]:
    """Read (version, function, notes) cell texts from the function table.

    The function and notes cells are converted to markdown in the page:
    line breaks are kept, links become [text](href), emphasis becomes *text*
    and wiki code boxes become a `title` line followed by a fenced lua block.
    Rows with fewer than three cells (headers, separators) are skipped.

    Args:
        page: A loaded Playwright Page showing the function overview

    Returns:
        One tuple of cell texts per table row

    Raises:
        ReferencePageError: If the page has no function table
    """
    logger.info("Extracting function rows from reference page")

    rows = await page.evaluate(
        """
        (selector) => {
            const table = document.querySelector(selector);
            if (!table) return null;

            const codeBox = (node) => {
                const title = node.querySelector('.box-title');
                const code = node.querySelector('.code');
                let result = '\\n';
                if (title) result += '`' + title.textContent.trim() + '`\\n\\n';
                if (code) {
                    const copy = code.cloneNode(true);
                    copy.querySelectorAll('br').forEach(br => br.replaceWith('\\n'));
                    const text = copy.textContent.replace(/\\u00a0/g, ' ').trim();
                    result += '```lua\\n' + text + '\\n```\\n';
                }
                return result;
            };

            const toMarkdown = (node) => {
                if (node.nodeType === Node.TEXT_NODE) {
                    return node.textContent.replace(/\\s+/g, ' ');
                }
                if (node.nodeType !== Node.ELEMENT_NODE) return '';
                if (node.nodeName === 'BR') return '\\n';
                if (node.nodeName === 'DIV' && node.classList.contains('box')) {
                    return codeBox(node);
                }

                const inner = Array.from(node.childNodes).map(toMarkdown).join('');
                switch (node.nodeName) {
                    case 'A': {
                        const href = node.getAttribute('href');
                        return href ? `[${inner}](${href})` : inner;
                    }
                    case 'EM':
                    case 'I':
                        return `*${inner}*`;
                    case 'STRONG':
                    case 'B':
                        return `**${inner}**`;
                    case 'P':
                    case 'DIV':
                        return '\\n' + inner + '\\n';
                    default:
                        return inner;
                }
            };

            return Array.from(table.querySelectorAll('tbody > tr'))
                .map(row => Array.from(row.querySelectorAll('td')))
                .filter(cells => cells.length >= 3)
                .map(cells => [
                    cells[0].textContent.trim(),
                    toMarkdown(cells[1]),
                    toMarkdown(cells[2]).trim(),
                ]);
        }
        """,
        TABLE_SELECTOR,
    )

    if rows is None:
        raise ReferencePageError(
            "Function table not found in reference page", phase="extraction"
        )

    logger.info(f"Found {len(rows)} function rows")
    return [tuple(row) for row in rows]


def parse_reference_parameters(params_str: str) -> list[Parameter]:
    """Split a documented parameter list; bracketed entries are optional."""
    params_str = OPTIONAL_COMMA_PATTERN.sub(", [", params_str)
    parameters = []
    for raw in params_str.split(","):
        raw = raw.strip()
        name = raw.replace("[", "").replace("]", "").strip()
        if name:
            parameters.append(Parameter(name=name, optional="[" in raw))
    return parameters


def _detail_lines(lines: list[str]) -> Iterator[str]:
    """Trim prose lines; lines inside ``` fences keep their indentation."""
    in_fence = False
    for line in lines:
        if line.strip().startswith("```"):
            in_fence = not in_fence
            yield line.strip()
        elif in_fence:
            yield line.rstrip()
        else:
            yield line.strip()


def parse_reference_row(
    version: str, function_text: str, notes: str
) -> FunctionRecord | None:
    """Turn one table row into a reference record.

    The function cell holds the signature on its first non-blank line, a
    one-line description on the second and any extended description after
    that. Paired blank lines in the extended description collapse to one
    line break.

    Args:
        version: Text of the version cell
        function_text: Markdown of the function cell
        notes: Markdown of the notes cell

    Returns:
        The parsed record, or None when the first line has no NAME(params)
    """
    lines = function_text.splitlines()
    content = [i for i, line in enumerate(lines) if line.strip()]
    if not content:
        return None

    signature = EMPHASIS_PATTERN.sub("", lines[content[0]].strip()).strip()
    match = SIGNATURE_PATTERN.search(signature)
    if not match:
        return None

    return_type = "unknown"
    return_match = RETURN_TYPE_PATTERN.match(signature)
    if return_match and return_match.group(1).lower() != "deprecated":
        return_type = return_match.group(1)

    description = ""
    detailed = ""
    if len(content) > 1:
        description = EMPHASIS_PATTERN.sub("", lines[content[1]].strip()).strip()
        rest = "\n".join(_detail_lines(lines[content[1] + 1 :]))
        detailed = rest.replace("\n\n", "\n").strip("\n")

    return FunctionRecord(
        name=match.group(1),
        namespace=GLOBAL_NAMESPACE,
        parameters=parse_reference_parameters(match.group(2)),
        return_type=return_type,
        source="reference",
        description=description,
        detailed=detailed,
        notes=notes.strip(),
        deprecated="deprecated" in version.lower(),
        kind="reference",
    )


async def extract_reference_functions(page: Page) -> list[FunctionRecord]:
    """Parse every function row of the loaded reference page.

    Args:
        page: A loaded Playwright Page showing the function overview

    Returns:
        Reference records in table order
    """
    records = []
    for version, function_text, notes in await extract_reference_rows(page):
        record = parse_reference_row(version, function_text, notes)
        if record is None:
            logger.debug(f"Skipping row without a signature: {function_text[:40]!r}")
            continue
        records.append(record)

    logger.info(f"Parsed {len(records)} functions from reference page")
    return records
