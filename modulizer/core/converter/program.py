"""Program model for the syntax rewriter.

tree-sitter trees are read-only, so a program is held as a list of
top-level Statements, each owning its source text. Phases rewrite a
statement by applying byte-range edits to its text; the statement is
re-parsed on demand. Every batch of edits is logged so that spans from
the original script (as reported by the analyzer) can still be located
in the statement's current text.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import tree_sitter

from ..ast_parser.models import SourceSpan
from ..ast_parser.utils import (
    TRIVIA_TYPES,
    VERBATIM_TYPES,
    first_statement,
    iife_body,
    is_use_strict,
    iter_descendants,
    line_indent,
    parse_javascript,
)

logger = logging.getLogger(__name__)

# (start, end, replacement) in the statement's current byte offsets
Edit = Tuple[int, int, str]


class Statement:
    """One top-level statement (with its leading comments).

    Attributes:
        origin: Byte offset of the text's first byte in the original
            script, or None for synthesized statements.
        span: Original span of the statement node itself (comments
            excluded), used to match analyzer features.
        blank_before: Print an empty line before this statement.
    """

    def __init__(
        self,
        text: str,
        origin: Optional[int] = None,
        span: Optional[SourceSpan] = None,
        blank_before: bool = False,
    ):
        self._source = text.encode("utf-8")
        self._original_length = len(self._source)
        self._tree: Optional[tree_sitter.Tree] = None
        self._edit_log: List[List[Tuple[int, int, int]]] = []
        self.origin = origin
        self.span = span
        self.blank_before = blank_before

    def __repr__(self) -> str:
        return f"Statement({self.text!r})"

    @property
    def text(self) -> str:
        return self._source.decode("utf-8")

    @property
    def source(self) -> bytes:
        return self._source

    @property
    def tree(self) -> tree_sitter.Tree:
        if self._tree is None:
            self._tree = parse_javascript(self._source)
        return self._tree

    @property
    def node(self) -> Optional[tree_sitter.Node]:
        """The statement node, or None for a comment-only statement."""
        return first_statement(self.tree.root_node)

    @property
    def leading_trivia(self) -> str:
        """Text before the statement node (comments, indentation)."""
        node = self.node
        end = node.start_byte if node is not None else len(self._source)
        return self._source[:end].decode("utf-8")

    # =========================================================================
    # Editing
    # =========================================================================

    def apply_edits(self, edits: Iterable[Edit]) -> int:
        """Apply non-overlapping edits given in current byte offsets.

        Returns:
            Number of edits applied

        Raises:
            ValueError: If two edits overlap
        """
        ordered = sorted(edits, key=lambda e: (e[0], e[1]))
        if not ordered:
            return 0

        out = bytearray()
        pos = 0
        batch: List[Tuple[int, int, int]] = []
        for start, end, replacement in ordered:
            if start < pos:
                raise ValueError(f"overlapping edits at byte {start} in {self!r}")
            data = replacement.encode("utf-8")
            out += self._source[pos:start]
            out += data
            pos = end
            batch.append((start, end, len(data)))
        out += self._source[pos:]

        self._source = bytes(out)
        self._tree = None
        self._edit_log.append(batch)
        return len(ordered)

    def rewrite(self, text: str) -> None:
        """Replace the statement node (keeping leading comments) with `text`."""
        node = self.node
        if node is None:
            self.apply_edits([(len(self._source), len(self._source), text)])
        else:
            self.apply_edits([(node.start_byte, node.end_byte, text)])

    def dedent(self, amount: int) -> int:
        """Remove up to `amount` columns of indentation from every line."""
        if amount <= 0:
            return 0
        return self.apply_edits(
            dedent_edits(self._source, self.tree.root_node, 0, len(self._source), amount, True)
        )

    # =========================================================================
    # Locating original spans
    # =========================================================================

    def covers(self, span: SourceSpan) -> bool:
        if self.origin is None:
            return False
        return self.origin <= span.start and span.end <= self.origin + self._original_length

    def locate(self, span: SourceSpan) -> Optional[Tuple[int, int]]:
        """Map an original script span to current byte offsets in this statement.

        Returns None if the span lies outside the statement or its text
        was rewritten away.
        """
        if not self.covers(span):
            return None
        start = self._map_offset(span.start - self.origin)
        end = self._map_offset(span.end - self.origin)
        if start is None or end is None:
            return None
        return start, end

    def find_node(self, span: SourceSpan, types: Sequence[str]) -> Optional[tree_sitter.Node]:
        """Find the node of one of `types` that originally occupied `span`."""
        located = self.locate(span)
        if located is None:
            return None
        start, end = located
        node = self.tree.root_node.descendant_for_byte_range(start, end)
        while node is not None and node.start_byte == start and node.end_byte == end:
            if node.type in types:
                return node
            node = node.parent
        return None

    def _map_offset(self, offset: int) -> Optional[int]:
        for batch in self._edit_log:
            delta = 0
            for start, end, length in batch:
                if end <= offset:
                    delta += length - (end - start)
                elif start < offset:
                    return None
                else:
                    break
            offset += delta
        return offset


class Program:
    """Ordered top-level statements of one script."""

    def __init__(self, statements: Optional[List[Statement]] = None):
        self.statements: List[Statement] = list(statements or [])

    @classmethod
    def from_source(cls, source_text: str) -> "Program":
        source = source_text.encode("utf-8")
        tree = parse_javascript(source)
        if tree.root_node.has_error:
            logger.warning("Tree-sitter reported parse errors in script")
        return cls(split_statements(source, tree.root_node.named_children))

    def __len__(self) -> int:
        return len(self.statements)

    def __getitem__(self, index: int) -> Statement:
        return self.statements[index]

    def __iter__(self):
        return iter(self.statements)

    def insert(self, index: int, statements: Sequence[Statement]) -> None:
        self.statements[index:index] = list(statements)

    def replace(self, index: int, count: int, statements: Sequence[Statement]) -> None:
        self.statements[index:index + count] = list(statements)

    def index_of(self, statement: Statement) -> int:
        for i, candidate in enumerate(self.statements):
            if candidate is statement:
                return i
        raise ValueError(f"{statement!r} is not in the program")

    def remove(self, statement: Statement) -> int:
        """Remove `statement` and return the index it had."""
        index = self.index_of(statement)
        del self.statements[index]
        return index

    def find_by_span(self, span: SourceSpan) -> Optional[Statement]:
        for statement in self.statements:
            if statement.span == span:
                return statement
        return None

    def find_covering(self, span: SourceSpan) -> Optional[Statement]:
        for statement in self.statements:
            if statement.covers(span):
                return statement
        return None

    def unwrap_module_body(self) -> bool:
        """Replace a lone top-level IIFE with the statements of its body.

        A leading "use strict" directive is dropped unless it is the only
        statement, and the body is de-indented by its common indentation.

        Returns:
            True if the program was unwrapped
        """
        real = [s for s in self.statements if s.node is not None]
        if len(real) != 1:
            return False
        wrapper = real[0]
        body = iife_body(wrapper.node)
        if body is None or wrapper.origin is None:
            return False

        statements = split_statements(wrapper.source, body.named_children, wrapper.origin)
        if sum(1 for s in statements if s.node is not None) > 1:
            for i, statement in enumerate(statements):
                if statement.node is None:
                    continue
                if is_use_strict(statement.node, statement.source):
                    del statements[i]
                break

        indents = [
            line_indent(s.source, s.node.start_byte) for s in statements if s.node is not None
        ]
        common = min(indents) if indents else 0
        for statement in statements:
            statement.dedent(common)

        if statements:
            statements[0].blank_before = False
        self.statements = statements
        return True

    def print(self) -> str:
        """Source text of the program; empty for a program with no statements."""
        if not self.statements:
            return ""
        parts: List[str] = []
        for i, statement in enumerate(self.statements):
            if i and statement.blank_before:
                parts.append("")
            parts.append(statement.text)
        return "\n".join(parts) + "\n"


# =============================================================================
# Helpers
# =============================================================================


def split_statements(
    source: bytes, children: Sequence[tree_sitter.Node], base: int = 0
) -> List[Statement]:
    """Group a statement list's children into Statements.

    Comments attach to the following statement, except a comment on the
    same line as the end of the previous statement, which stays with it.
    Comments after the last statement form a comment-only Statement.
    `base` is the original script offset of `source`.
    """
    groups: List[List[tree_sitter.Node]] = []
    pending: List[tree_sitter.Node] = []
    for child in children:
        if child.type in TRIVIA_TYPES:
            if (
                not pending
                and groups
                and child.start_point.row == groups[-1][-1].end_point.row
            ):
                groups[-1].append(child)
            else:
                pending.append(child)
            continue
        groups.append(pending + [child])
        pending = []
    if pending:
        groups.append(pending)

    statements: List[Statement] = []
    prev_end = None
    for group in groups:
        start = group[0].start_byte
        end = group[-1].end_byte
        line_start = source.rfind(b"\n", 0, start) + 1
        if not source[line_start:start].strip():
            start = line_start

        node = next((n for n in group if n.type not in TRIVIA_TYPES), None)
        span = SourceSpan(base + node.start_byte, base + node.end_byte) if node is not None else None
        blank_before = prev_end is not None and source.count(b"\n", prev_end, start) >= 2

        statements.append(Statement(
            source[start:end].decode("utf-8"),
            origin=base + start,
            span=span,
            blank_before=blank_before,
        ))
        prev_end = end
    return statements


def dedent_edits(
    source: bytes,
    root: tree_sitter.Node,
    start: int,
    end: int,
    amount: int,
    include_first: bool = False,
) -> List[Edit]:
    """Edits removing up to `amount` columns of indentation in [start, end).

    Lines that begin inside a string or template literal are left alone.
    """
    verbatim = [
        (n.start_byte, n.end_byte)
        for n in iter_descendants(root)
        if n.type in VERBATIM_TYPES and n.start_byte < end and n.end_byte > start
    ]
    line_starts = [start] if include_first else []
    pos = source.find(b"\n", start, end)
    while pos != -1:
        line_starts.append(pos + 1)
        pos = source.find(b"\n", pos + 1, end)

    edits: List[Edit] = []
    for line_start in line_starts:
        if line_start >= end:
            continue
        if any(vs < line_start < ve for vs, ve in verbatim):
            continue
        width = 0
        while (
            width < amount
            and line_start + width < end
            and source[line_start + width] in b" \t"
        ):
            width += 1
        if width:
            edits.append((line_start, line_start + width, ""))
    return edits


def dedented_text(source: bytes, root: tree_sitter.Node, start: int, end: int, amount: int) -> str:
    """Text of source[start:end] with continuation lines de-indented by `amount`."""
    out = bytearray()
    pos = start
    for edit_start, edit_end, _ in dedent_edits(source, root, start, end, amount):
        out += source[pos:edit_start]
        pos = edit_end
    out += source[pos:end]
    return out.decode("utf-8")
