"""
Splitting and classification of SQL dump text.

A dump is split into top-level statements, each tagged with a
`StatementType`, and then grouped into the buckets of a `ParsedDump`.
Routines and triggers are usually written inside `DELIMITER` regions
(`DELIMITER $$ ... $$ DELIMITER ;`), so those regions are cut out and split on
their own delimiter before the rest of the text is split on `;`.

## Functions

- `clean_sql_text`: Remove `--` comment lines and blank lines.
- `get_delimiters`: Get the custom delimiters declared in the text.
- `change_definer`: Rewrite the DEFINER clause of a statement.
- `get_non_table_creates`: Get the statements of the DELIMITER regions.
- `split_statements`: Split the text into classified statements.
- `parse_sql_dump`: Split the text and group the statements into buckets.
"""
import re
from typing import Optional, TYPE_CHECKING

from ._core import DumpNames, ParsedDump, RawStatement, StatementType
from .ddl_parser import (
    get_name_from_query, get_names_from_queries, parse_routine_name, split_multi_clause_alter,
    split_top_level, strip_column_definition_from_create
)
from .dependency import build_dependency_graph, topological_sort

if TYPE_CHECKING:
    from ..config import SqlConfig



_DELIMITER_DIRECTIVE = re.compile(r"^[ \t]*DELIMITER[ \t]+(\S+)[ \t]*$", re.I | re.M)
_DEFINER = re.compile(
    r"DEFINER\s*=\s*(?:`[^`]*`|'[^']*'|[\w$]+)@(?:`[^`]*`|'[^']*'|[\w$.%-]+)")
_CREATE_OBJECT = re.compile(
    r"^CREATE\b[^(;]*?\b(TABLE|VIEW|FUNCTION|PROCEDURE|TRIGGER)\b", re.I)
# mysqldump wraps the keywords of a routine in versioned comments:
# /*!50003 CREATE*/ /*!50017 DEFINER=...*/ /*!50003 TRIGGER ...
_CREATE_ROUTINE = re.compile(
    r"^(?:/\*!\d*\s*)?CREATE\b.*?\b(PROCEDURE|FUNCTION|TRIGGER)\b", re.I | re.S)

_CREATE_KINDS = {
    "TABLE": StatementType.CREATE_TABLE,
    "VIEW": StatementType.CREATE_VIEW,
    "FUNCTION": StatementType.CREATE_FUNCTION,
    "PROCEDURE": StatementType.CREATE_PROCEDURE,
    "TRIGGER": StatementType.CREATE_TRIGGER,
}

_ROUTINE_KINDS = (
    StatementType.CREATE_FUNCTION,
    StatementType.CREATE_PROCEDURE,
    StatementType.CREATE_TRIGGER,
)


def clean_sql_text(text: str) -> str:
    """Remove `--` comment lines and blank lines from SQL text.

    Examples
    --------
    >>> clean_sql_text("-- Table structure\\n\\nCREATE TABLE `t` (\\n  `id` int\\n);\\n")
    'CREATE TABLE `t` (\\n  `id` int\\n);'
    """
    lines = []
    for line in text.splitlines():
        if not line.strip() or line.lstrip().startswith("--"):
            continue
        lines.append(line.rstrip())
    return "\n".join(lines)

def get_delimiters(sql: str) -> list[str]:
    """Get the custom delimiters declared by `DELIMITER` directives.

    Returns
    -------
    list[str]
        Distinct delimiters other than `;`, in order of appearance
    """
    delimiters = []
    for match in _DELIMITER_DIRECTIVE.finditer(sql):
        token = match.group(1)
        if token != ";" and token not in delimiters:
            delimiters.append(token)
    return delimiters

def change_definer(query: str, user: Optional[str], host: Optional[str]) -> str:
    """Rewrite the first DEFINER clause to ``DEFINER=`user`@`host` ``.

    The query is returned unchanged if `user` or `host` is not given.
    """
    if not user or not host:
        return query
    return _DEFINER.sub(f"DEFINER=`{user}`@`{host}`", query, count=1)

def _definer_of(config: Optional["SqlConfig"]) -> tuple[Optional[str], Optional[str]]:
    if config is None:
        return None, None
    return config.connection.user, config.connection.host

#
# DELIMITER regions
#

def _delimiter_regions(sql: str) -> list[tuple[int, int, str, str]]:
    """Get (start, end, body, delimiter) of every custom delimiter region.

    A region starts at a `DELIMITER <token>` directive and ends at the next
    directive; a closing `DELIMITER ;` belongs to the region.
    """
    directives = list(_DELIMITER_DIRECTIVE.finditer(sql))
    regions = []
    for i, directive in enumerate(directives):
        token = directive.group(1)
        if token == ";":
            continue

        following = directives[i+1] if i + 1 < len(directives) else None
        if following is None:
            regions.append((directive.start(), len(sql), sql[directive.end():], token))
        else:
            end = following.end() if following.group(1) == ";" else following.start()
            regions.append((directive.start(), end,
                            sql[directive.end():following.start()], token))
    return regions

def _classify_routine(text: str) -> RawStatement:
    if (match := _CREATE_OBJECT.match(text)) and match.group(1).upper() in ("TABLE", "VIEW"):
        return RawStatement(text, StatementType.MISC)
    if match := _CREATE_ROUTINE.match(text):
        kind = _CREATE_KINDS[match.group(1).upper()]
        return RawStatement(text, kind, parse_routine_name(text))
    return RawStatement(text, StatementType.MISC)

def _split_region(body: str, delimiter: str,
                  user: Optional[str], host: Optional[str]) -> list[RawStatement]:
    statements = []
    for fragment in body.split(delimiter):
        if fragment := fragment.strip():
            statements.append(_classify_routine(change_definer(fragment, user, host)))
    return statements

def get_non_table_creates(sql: str, config: Optional["SqlConfig"] = None) -> list[RawStatement]:
    """Get the statements written inside DELIMITER regions.

    Each region is split on its own delimiter and the DEFINER clause of every
    fragment is rewritten with the configured user and host.

    Args
    ----
    sql : str
        SQL text (comment lines are removed with `clean_sql_text`)
    config : Optional[SqlConfig]
        Configuration holding the DEFINER user and host

    Returns
    -------
    list[RawStatement]
        CREATE_FUNCTION / CREATE_PROCEDURE / CREATE_TRIGGER statements;
        fragments that are none of them are tagged MISC
    """
    user, host = _definer_of(config)
    statements = []
    for _, _, body, delimiter in _delimiter_regions(clean_sql_text(sql)):
        statements.extend(_split_region(body, delimiter, user, host))
    return statements

#
# Top-level statements
#

def _classify(text: str) -> RawStatement:
    """Tag a statement by its leading keyword."""
    keyword = re.match(r"\w*", text).group(0).upper()

    if keyword == "INSERT":
        kind = StatementType.INSERT
    elif keyword == "ALTER":
        kind = StatementType.ALTER
    elif keyword == "DROP":
        kind = StatementType.DROP
    elif keyword == "CREATE" and (match := _CREATE_OBJECT.match(text)):
        kind = _CREATE_KINDS[match.group(1).upper()]
    else:
        return RawStatement(text, StatementType.MISC)

    if kind in _ROUTINE_KINDS:
        return RawStatement(text, kind, parse_routine_name(text))
    return RawStatement(text, kind, get_name_from_query(kind, text))

def split_statements(sql: str, config: Optional["SqlConfig"] = None) -> list[RawStatement]:
    """Split SQL text into classified statements.

    DELIMITER regions are split on their own delimiter; the rest of the text
    is split on `;` outside of quotes. Statements keep their order of
    appearance and every non-empty statement is returned.

    Args
    ----
    sql : str
        SQL text (comment lines are removed with `clean_sql_text`)
    config : Optional[SqlConfig]
        Configuration holding the DEFINER user and host

    Returns
    -------
    list[RawStatement]
        Classified statements without their terminating delimiter

    Examples
    --------
    >>> [s.kind for s in split_statements("DROP TABLE IF EXISTS `t`; CREATE TABLE `t` (`id` int);")]
    [<StatementType.DROP: 8>, <StatementType.CREATE_TABLE: 1>]
    """
    sql = clean_sql_text(sql)
    user, host = _definer_of(config)

    statements: list[RawStatement] = []
    position = 0
    for start, end, body, delimiter in _delimiter_regions(sql):
        statements.extend(_classify(s) for s in split_top_level(sql[position:start], ";", nested=False))
        statements.extend(_split_region(body, delimiter, user, host))
        position = end
    statements.extend(_classify(s) for s in split_top_level(sql[position:], ";", nested=False))

    return [s for s in statements if s.text]

def parse_sql_dump(sql: str, config: Optional["SqlConfig"] = None) -> ParsedDump:
    """Parse SQL dump text into statement buckets.

    - INSERT statements are grouped by table.
    - ALTER statements are split into single-clause statements.
    - CREATE TABLE statements are reduced to their column definitions;
      the relocated key definitions are added to the ALTER statements.
    - CREATE VIEW, FUNCTION, PROCEDURE and TRIGGER statements get their
      DEFINER rewritten.
    - Tables are sorted by their FOREIGN KEY dependencies.

    Args
    ----
    sql : str
        SQL dump text
    config : Optional[SqlConfig]
        Configuration holding the DEFINER user and host

    Returns
    -------
    ParsedDump
        Statement buckets, table order and object names
    """
    user, host = _definer_of(config)
    parsed = ParsedDump()

    for statement in split_statements(sql, config):
        kind, text, name = statement.kind, statement.text, statement.name

        if kind == StatementType.INSERT and name:
            parsed.inserts.setdefault(name, []).append(text)
        elif kind == StatementType.ALTER:
            parsed.alters.extend(split_multi_clause_alter(text))
        elif kind == StatementType.CREATE_VIEW:
            parsed.views.append(change_definer(text, user, host))
        elif kind == StatementType.CREATE_TABLE and name:
            stripped = strip_column_definition_from_create(text)
            parsed.tables.setdefault(name, []).append(stripped.query)
            parsed.alters.extend(stripped.alters)
        elif kind == StatementType.CREATE_FUNCTION:
            parsed.functions.append(change_definer(text, user, host))
        elif kind == StatementType.CREATE_PROCEDURE:
            parsed.procedures.append(change_definer(text, user, host))
        elif kind == StatementType.CREATE_TRIGGER:
            parsed.triggers.append(change_definer(text, user, host))
        elif kind == StatementType.DROP:
            parsed.drops.append(text)
        else:
            parsed.misc.append(text)

    result = topological_sort(build_dependency_graph(parsed.alters, parsed.tables))
    parsed.order = result.order
    parsed.unresolved = result.unresolved

    parsed.names = DumpNames(
        tables=list(parsed.tables),
        views=get_names_from_queries(StatementType.CREATE_VIEW, parsed.views),
        functions=[n for n in map(parse_routine_name, parsed.functions) if n],
        procedures=[n for n in map(parse_routine_name, parsed.procedures) if n],
        triggers=[n for n in map(parse_routine_name, parsed.triggers) if n],
    )
    return parsed
