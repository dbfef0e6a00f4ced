"""
Text preparation for the embedding path.

The lexical path has its own tokenizer (see bm25.tokenizer); embedding inputs
only need a canonical lowercase string without punctuation.
"""

import re
from pathlib import PurePosixPath
from typing import Optional

_NON_WORD = re.compile(r'[^\w\s]')


def normalize_for_embedding(text: Optional[str]) -> str:
    """
    Lowercase text and strip every character that is not a word character
    or whitespace.

    Examples:
        >>> normalize_for_embedding("Finance/Invoices")
        'financeinvoices'
        >>> normalize_for_embedding("Invoice #4521, due net-30!")
        'invoice 4521 due net30'
    """
    if not text:
        return ""
    return _NON_WORD.sub('', text.lower())


def build_query_text(content: Optional[str], file_name: Optional[str] = None) -> str:
    """
    Combine note content with its file name.

    The file name (base name, extension dropped) is placed on its own line
    before the content so it contributes to both ranking signals.

    Examples:
        >>> build_query_text("Paid in full", "Inbox/ACME invoice.md")
        'ACME invoice\\nPaid in full'
    """
    content = content or ""
    if not file_name or not file_name.strip():
        return content

    stem = PurePosixPath(file_name.strip().replace("\\", "/")).stem
    if not stem:
        return content
    return f"{stem}\n{content}" if content else stem
