"""
Alias table parser - one declaration per line, parsed with Lark
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Union

from lark import Lark, Transformer, v_args
from lark.exceptions import UnexpectedInput, VisitError

from subjectalias.api import AliasEntry, AliasKind
from subjectalias.errors import TableSyntaxError


@dataclass
class Declaration:
    """A single ``KIND ALIAS TARGET ["doc"]`` line of a table file"""

    kind: AliasKind
    alias_name: str
    target_name: str
    doc: Optional[str] = None
    line: Optional[int] = None

    @classmethod
    def from_entry(cls, entry: AliasEntry) -> "Declaration":
        return cls(entry.kind, entry.alias_name, entry.target_name, entry.doc)

    def to_entry(self, table: Optional[str] = None) -> AliasEntry:
        return AliasEntry(
            alias_name=self.alias_name,
            target_name=self.target_name,
            kind=self.kind,
            doc=self.doc,
            table=table,
        )

    def to_syntax(self) -> str:
        text = f"{self.kind.value:<9} {self.alias_name} {self.target_name}"
        if self.doc:
            escaped = self.doc.replace("\\", "\\\\").replace('"', '\\"')
            text += f' "{escaped}"'
        return text


# Lark grammar for alias tables
grammar = r"""
    table: (_NL | entry)*

    entry: KIND NAME NAME doc? _NL
    doc: ESCAPED_STRING

    // The kind keyword must be followed by blanks, so "values" is not a kind
    KIND.2: /(operation|value)(?=[ \t])/

    // Any run of non-blank characters except quotes and the comment marker
    NAME: /[^\s"#]+/

    COMMENT: /#[^\n]*/
    _NL: /(\r?\n)+/

    %import common.ESCAPED_STRING
    %ignore /[ \t\f]+/
    %ignore COMMENT
"""


class AliasTableTransformer(Transformer):
    """Transform the parse tree into Declaration records"""

    def table(self, entries):
        return list(entries)

    @v_args(inline=True)
    def entry(self, kind, alias_name, target_name, doc=None):
        return Declaration(
            kind=AliasKind(str(kind)),
            alias_name=str(alias_name),
            target_name=str(target_name),
            doc=doc,
            line=kind.line,
        )

    @v_args(inline=True)
    def doc(self, token):
        # Remove the quotes and undo escaping
        return token[1:-1].replace('\\"', '"').replace("\\\\", "\\")


parser = Lark(
    grammar,
    start="table",
    parser="lalr",
    transformer=AliasTableTransformer(),
    maybe_placeholders=False,
)


def parse_table_content(content: str, table: str = "<string>") -> List[Declaration]:
    """
    Parse alias declarations from a string

    Args:
        content: Table text
        table: Name used in error messages

    Returns:
        Declarations in file order
    """
    if not content.endswith("\n"):
        content += "\n"
    try:
        result = parser.parse(content)
    except UnexpectedInput as exc:
        raise TableSyntaxError(table, exc.line, _describe(exc)) from exc
    except VisitError as exc:
        raise TableSyntaxError(table, None, str(exc.orig_exc)) from exc

    if not isinstance(result, list):
        raise ValueError(f"Expected list of declarations, got {type(result).__name__}")
    return result


def parse_table(filename: Union[str, Path]) -> List[Declaration]:
    """Parse alias declarations from a table file"""
    path = Path(filename)
    return parse_table_content(path.read_text(encoding="utf-8"), table=path.stem)


def _describe(exc: UnexpectedInput) -> str:
    token = getattr(exc, "token", None)
    if token is not None:
        if token.type == "$END":
            return "unexpected end of table"
        return f"unexpected {str(token)!r}"
    char = getattr(exc, "char", None)
    if char is not None:
        return f"unexpected character {char!r}"
    return exc.__class__.__name__
