"""
This module extracts structured facts from single DDL/DML statements of a
MySQL / MariaDB dump: object names, column definitions, ALTER clauses, and the
key clauses embedded in CREATE TABLE bodies.
It uses regular expressions and a small quote-aware scanner instead of a full
SQL grammar, so every extractor returns None (or the input unchanged) when a
statement does not fit the expected shape.

## Functions

- `get_name_from_query`: Extract the object name of a statement.
- `parse_routine_name`: Extract the name of a FUNCTION / PROCEDURE / TRIGGER.
- `get_columns_from_create_table`: Extract column definitions from CREATE TABLE.
- `get_key_definitions_from_create_table`: Extract key clauses from CREATE TABLE.
- `parse_column_definition`: Parse a column definition.
- `parse_alter_clause`: Parse a single-clause ALTER TABLE statement.
- `split_multi_clause_alter`: Split an ALTER TABLE with several ADD/MODIFY clauses.
- `split_multi_value_insert`: Split an INSERT with several value tuples.
- `strip_column_definition_from_create`: Move key clauses of CREATE TABLE to ALTER.
- `split_alter_key_and_foreign_key`: Separate FOREIGN KEY ALTERs from other ALTERs.

## Example

```sql
CREATE TABLE `d_user_lab` (
  `id` int(11) NOT NULL AUTO_INCREMENT,
  `email` varchar(64) DEFAULT NULL,
  PRIMARY KEY (`id`),
  CONSTRAINT `ulab_email` FOREIGN KEY (`email`) REFERENCES `d_user` (`email`)
) ENGINE=InnoDB AUTO_INCREMENT=3
```

is stripped by `strip_column_definition_from_create` into:

```
CREATE TABLE `d_user_lab` (
  `id` int(11) NOT NULL,
  `email` varchar(64) DEFAULT NULL
) ENGINE=InnoDB

ALTER TABLE `d_user_lab` ADD PRIMARY KEY (`id`)
ALTER TABLE `d_user_lab` ADD CONSTRAINT `ulab_email` FOREIGN KEY (`email`) REFERENCES `d_user` (`email`)
ALTER TABLE `d_user_lab` MODIFY `id` int(11) NOT NULL AUTO_INCREMENT, AUTO_INCREMENT=3
```
"""
import re
from typing import Optional

from ._core import (
    AlterClause, AlterType, ColumnDefinition, ForeignReference,
    StatementType, StrippedCreate
)



IDENT = r"(?:`[^`]+`|\"[^\"]+\"|[\w$]+)"
"""Regex of a single (optionally quoted) identifier"""
QUALIFIED = rf"{IDENT}(?:\s*\.\s*{IDENT})?"
"""Regex of an identifier optionally qualified with a schema name"""

CHARACTER_TYPES = frozenset({"char", "varchar", "binary", "varbinary"})
"""Types whose size is a character length"""

_NAME_PATTERNS: dict[StatementType, re.Pattern] = {
    StatementType.CREATE_TABLE: re.compile(
        rf"CREATE\s+(?:OR\s+REPLACE\s+)?(?:TEMPORARY\s+)?TABLE\s+"
        rf"(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})", re.I),
    StatementType.CREATE_VIEW: re.compile(
        rf"CREATE\b[^(]*?\bVIEW\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})", re.I),
    StatementType.CREATE_FUNCTION: re.compile(
        rf"CREATE\b[^(]*?\bFUNCTION\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})", re.I),
    StatementType.CREATE_PROCEDURE: re.compile(
        rf"CREATE\b[^(]*?\bPROCEDURE\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})", re.I),
    StatementType.CREATE_TRIGGER: re.compile(
        rf"CREATE\b[^(]*?\bTRIGGER\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})", re.I),
    StatementType.ALTER: re.compile(
        rf"ALTER\s+(?:(?:ONLINE|IGNORE)\s+)*TABLE\s+({QUALIFIED})", re.I),
    StatementType.INSERT: re.compile(
        rf"INSERT\s+(?:(?:LOW_PRIORITY|DELAYED|HIGH_PRIORITY|IGNORE)\s+)*INTO\s+({QUALIFIED})",
        re.I),
    StatementType.DROP: re.compile(
        rf"DROP\s+(?:TEMPORARY\s+)?(?:TABLE|VIEW|FUNCTION|PROCEDURE|TRIGGER|DATABASE|SCHEMA)\s+"
        rf"(?:IF\s+EXISTS\s+)?({QUALIFIED})", re.I),
}

_ALTER_HEADER = re.compile(
    rf"^\s*ALTER\s+(?:(?:ONLINE|IGNORE)\s+)*TABLE\s+({QUALIFIED})\s*", re.I)

_INSERT_HEADER = re.compile(
    rf"^\s*(INSERT\s+(?:(?:LOW_PRIORITY|DELAYED|HIGH_PRIORITY|IGNORE)\s+)*INTO\s+{QUALIFIED})"
    r"\s*(\([^()]*\))?\s*VALUES?\s*", re.I)

# Lines of a CREATE TABLE body that are not column definitions
_KEY_LINE = re.compile(
    r"^(?:PRIMARY\s+KEY|UNIQUE\b|KEY\b|INDEX\b|CONSTRAINT\b|FOREIGN\s+KEY|"
    r"FULLTEXT\b|SPATIAL\b|CHECK\b|PERIOD\b)", re.I)

# Key lines of a CREATE TABLE body that are moved into ALTER statements
_RELOCATED_KEY_LINE = re.compile(
    rf"^(?:PRIMARY\s+KEY|UNIQUE\b|KEY\b|INDEX\b|FOREIGN\s+KEY|FULLTEXT\b|SPATIAL\b|"
    rf"CONSTRAINT(?:\s+{IDENT})?\s+(?:PRIMARY\s+KEY|UNIQUE\b|FOREIGN\s+KEY))", re.I)

_TYPE = re.compile(
    r"^\s*([A-Za-z]\w*)"
    r"(?:\s*\(((?:[^()'\"]|'(?:[^'\\]|\\.|'')*'|\"(?:[^\"\\]|\\.)*\")*)\))?")

_COLUMN_TOKEN = re.compile(r"""
    (?:[bBxXnN]|_\w+)?'(?:[^'\\]|\\.|'')*'
  | "(?:[^"\\]|\\.|"")*"
  | `[^`]*`
  | -?\d+(?:\.\d+)?(?:[eE][-+]?\d+)?
  | [A-Za-z_$][\w$]*(?:\((?:[^()'"]|'(?:[^'\\]|\\.|'')*'|\([^()]*\))*\))?
  | \((?:[^()'"]|'(?:[^'\\]|\\.|'')*'|\([^()]*\))*\)
  | \S
""", re.VERBOSE)

_PRIMARY_CLAUSE = re.compile(
    rf"^(?:ADD\s+)?(?:CONSTRAINT(?:\s+{IDENT})?\s+)?PRIMARY\s+KEY\b[^(]*(?=\()", re.I)
_MODIFY_CLAUSE = re.compile(
    rf"^MODIFY\s+(?:COLUMN\s+)?(?:IF\s+EXISTS\s+)?({IDENT})\s+(.+)$", re.I | re.S)
_FOREIGN_CLAUSE = re.compile(
    rf"^(?:ADD\s+)?(?:CONSTRAINT(?:\s+({IDENT}))?\s+)?FOREIGN\s+KEY\s*"
    rf"(?:IF\s+NOT\s+EXISTS\s+)?(?:{IDENT}\s*)?(?=\()", re.I)
_REFERENCES = re.compile(rf"^\s*REFERENCES\s+({QUALIFIED})\s*(?=\()", re.I)
_KEY_CLAUSE = re.compile(
    rf"^(?:ADD\s+)?(?:CONSTRAINT(?:\s+{IDENT})?\s+)?"
    r"(UNIQUE(?:\s+(?:KEY|INDEX))?|KEY|INDEX|"
    r"(?:FULLTEXT|SPATIAL)(?:\s+(?:KEY|INDEX))?)\b\s*"
    rf"(?:IF\s+NOT\s+EXISTS\s+)?(?!USING\b)({IDENT})?\s*(?:USING\s+\w+\s*)?(?=\()", re.I)
_ADD_COLUMN_CLAUSE = re.compile(
    rf"^ADD\s+(?:COLUMN\s+)?(?:IF\s+NOT\s+EXISTS\s+)?({IDENT})\s+(.+)$", re.I | re.S)
_ALTER_ACTION = re.compile(r"(?:ADD|MODIFY|CHANGE|DROP|ALTER|RENAME)\b", re.I)

_CLAUSE_KEYWORDS = frozenset({
    "PRIMARY", "UNIQUE", "KEY", "INDEX", "CONSTRAINT", "FOREIGN",
    "FULLTEXT", "SPATIAL", "CHECK", "PARTITION", "PERIOD", "SYSTEM"
})
"""Words that start an ADD clause which is not a column definition"""

#
# Scanning helpers
#

def unquote_identifier(name: str) -> str:
    """Return the bare name of an identifier.

    Quotes are removed and a schema qualifier is dropped.

    Examples
    --------
    >>> unquote_identifier("`test_db`.`d_lab`")
    'd_lab'
    >>> unquote_identifier('"users"')
    'users'
    """
    parts = re.findall(IDENT, name)
    if not parts:
        return name.strip()
    return parts[-1].strip('`"')

def quote_identifier(name: str) -> str:
    """Quote an identifier with backquotes unless it is already quoted
    or schema-qualified."""
    name = name.strip()
    if name.startswith(("`", '"')) or "." in name:
        return name
    return f"`{name}`"

def split_top_level(content: str, separator: str = ",", nested: bool = True) -> list[str]:
    """Split SQL content on a separator that is outside of quotes
    (and outside of parentheses if `nested` is True).

    Args
    ----
    content : str
        SQL content to split
    separator : str
        Single separator character
    nested : bool
        If True, separators inside parentheses are ignored

    Returns
    -------
    list[str]
        Stripped parts; empty parts are kept so that callers can decide

    Examples
    --------
    >>> split_top_level("`id` int(11) NOT NULL, `price` decimal(10,2), KEY `k` (`a`,`b`)")
    ['`id` int(11) NOT NULL', '`price` decimal(10,2)', 'KEY `k` (`a`,`b`)']
    >>> split_top_level("INSERT INTO t VALUES ('a;b'); SELECT 1", ";", nested=False)
    ["INSERT INTO t VALUES ('a;b')", 'SELECT 1']
    """
    parts = []
    current: list[str] = []
    quote = ""
    depth = 0
    escaped = False

    for char in content:
        if quote:
            current.append(char)
            if escaped:
                escaped = False
            elif char == "\\" and quote != "`":
                escaped = True
            elif char == quote:
                quote = ""
            continue

        if char in ("'", '"', "`"):
            quote = char
        elif nested and char == "(":
            depth += 1
        elif nested and char == ")":
            depth -= 1
        elif char == separator and depth <= 0:
            parts.append("".join(current).strip())
            current = []
            continue
        current.append(char)

    if "".join(current).strip():
        parts.append("".join(current).strip())

    return parts

def _find_closing_paren(text: str, start: int) -> int:
    """Return the index of the parenthesis closing the one at `start`,
    or -1 if it is not closed."""
    depth = 0
    quote = ""
    escaped = False
    for i in range(start, len(text)):
        char = text[i]
        if quote:
            if escaped:
                escaped = False
            elif char == "\\" and quote != "`":
                escaped = True
            elif char == quote:
                quote = ""
        elif char in ("'", '"', "`"):
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return i
    return -1

def _mask_literals(text: str) -> str:
    """Replace the content of quoted strings with spaces, keeping positions."""
    return re.sub(
        r"'(?:[^'\\]|\\.|'')*'|\"(?:[^\"\\]|\\.|\"\")*\"",
        lambda m: " " * len(m.group(0)), text
    )

def _key_columns(content: str) -> list[str]:
    """Column names of a key column list such as "`a`, `b`(10) DESC"."""
    columns = []
    for part in split_top_level(content):
        if match := re.match(IDENT, part.strip()):
            columns.append(unquote_identifier(match.group(0)))
    return columns

#
# Names
#

def get_name_from_query(kind: StatementType, query: str) -> Optional[str]:
    """Get the name of the object a statement targets.

    Args
    ----
    kind : StatementType
        Type of the statement
    query : str
        SQL statement

    Returns
    -------
    Optional[str]
        Object name without quotes and schema qualifier,
        None if the statement does not match `kind`

    Examples
    --------
    >>> get_name_from_query(StatementType.INSERT, "INSERT INTO `d_lab` (`code`) VALUES ('LT')")
    'd_lab'
    """
    if not isinstance(query, str) or kind not in _NAME_PATTERNS:
        return None

    match = _NAME_PATTERNS[kind].match(query.strip())
    if not match:
        return None
    return unquote_identifier(match.group(1))

def get_names_from_queries(kind: StatementType, queries: list[str]) -> list[str]:
    """Get the names of the objects targeted by statements of the same kind."""
    names = []
    for query in queries:
        if name := get_name_from_query(kind, query):
            names.append(name)
    return names

def parse_routine_name(query: str) -> Optional[str]:
    """Get the name of a FUNCTION, PROCEDURE or TRIGGER from its CREATE statement."""
    match = re.search(
        rf"\b(?:FUNCTION|PROCEDURE|TRIGGER)\s+(?:IF\s+NOT\s+EXISTS\s+)?({QUALIFIED})",
        query, re.I
    )
    return unquote_identifier(match.group(1)) if match else None

#
# CREATE TABLE body
#

def _create_table_body(query: str) -> Optional[tuple[int, int]]:
    """Positions of the parentheses enclosing a CREATE TABLE body."""
    header = _NAME_PATTERNS[StatementType.CREATE_TABLE].match(query)
    if not header:
        return None

    open_pos = query.find("(", header.end())
    if open_pos < 0 or query[header.end():open_pos].strip():
        # CREATE TABLE ... LIKE / AS SELECT
        return None

    close_pos = _find_closing_paren(query, open_pos)
    if close_pos < 0:
        return None
    return open_pos, close_pos

def _create_table_parts(query: str) -> list[str]:
    if (span := _create_table_body(query.strip())) is None:
        return []
    open_pos, close_pos = span
    return [p for p in split_top_level(query.strip()[open_pos+1:close_pos]) if p]

def get_columns_from_create_table(query: str) -> dict[str, str]:
    """Get column definitions from a CREATE TABLE statement.

    Args
    ----
    query : str
        CREATE TABLE statement

    Returns
    -------
    dict[str, str]
        Column name -> definition text (everything after the name),
        in definition order. Key and constraint lines are not included.

    Examples
    --------
    >>> get_columns_from_create_table(
    ...     "CREATE TABLE `d_lab` (`code` varchar(64) NOT NULL, PRIMARY KEY (`code`))")
    {'code': 'varchar(64) NOT NULL'}
    """
    columns: dict[str, str] = {}
    for part in _create_table_parts(query):
        if _KEY_LINE.match(part):
            continue
        if match := re.match(rf"({IDENT})\s+(.+)$", part, re.S):
            columns[unquote_identifier(match.group(1))] = match.group(2).strip()
    return columns

def get_key_definitions_from_create_table(query: str) -> list[str]:
    """Get the key and constraint lines of a CREATE TABLE body
    (e.g. "PRIMARY KEY (`id`)")."""
    return [part for part in _create_table_parts(query) if _KEY_LINE.match(part)]

#
# Column definition
#

def parse_column_definition(text: str) -> Optional[ColumnDefinition]:
    """Parse a column definition.

    Recognizes
    `TYPE[(SIZE)] [UNSIGNED] [NOT NULL|NULL] [CHARACTER SET ...] [DEFAULT value] [AUTO_INCREMENT]`
    in any keyword order; `COLLATE`, `COMMENT`, `ON UPDATE` and inline
    `PRIMARY KEY` are accepted too. Parsing stops at a top-level comma, so
    `int(11) NOT NULL AUTO_INCREMENT, AUTO_INCREMENT=3` is accepted.

    Args
    ----
    text : str
        Column definition without the column name (e.g. "varchar(64) NOT NULL")

    Returns
    -------
    Optional[ColumnDefinition]
        Column definition, None if the type cannot be recognized

    Notes
    -----
    - When neither `NULL` nor `NOT NULL` is written, the column is NOT NULL
      unless its default is `NULL`.
    """
    type_match = _TYPE.match(text or "")
    if not type_match:
        return None

    datatype = type_match.group(1).lower()
    args = type_match.group(2)
    if args is not None:
        args = args.strip()
        if "'" not in args and '"' not in args:
            args = re.sub(r"\s*,\s*", ",", args)

    size = 0
    if args and (size_match := re.match(r"(\d+)", args)):
        size = int(size_match.group(1))

    unsigned = False
    nullable: Optional[bool] = None
    default: Optional[str] = None
    auto_increment = False
    primary = False

    tokens = _COLUMN_TOKEN.findall(text[type_match.end():])
    i = 0
    while i < len(tokens):
        token = tokens[i]
        upper = token.upper()
        following = tokens[i+1].upper() if i + 1 < len(tokens) else ""

        if token == ",":
            break
        if upper == "UNSIGNED":
            unsigned = True
        elif upper == "NOT" and following == "NULL":
            nullable = False
            i += 1
        elif upper == "NULL":
            nullable = True
        elif upper in ("CHARACTER", "CHAR") and following == "SET":
            i += 2
        elif upper in ("CHARSET", "COLLATE", "COMMENT"):
            i += 1
        elif upper == "DEFAULT" and following:
            default = "NULL" if following == "NULL" else tokens[i+1]
            i += 1
        elif upper == "AUTO_INCREMENT":
            auto_increment = True
            if following == "=":
                i += 2
        elif upper == "ON" and following == "UPDATE":
            i += 2
        elif upper == "PRIMARY" and following == "KEY":
            primary = True
            i += 1
        i += 1

    if nullable is None:
        nullable = default == "NULL"

    column_type = f"{datatype}({args})" if args is not None else datatype
    if unsigned:
        column_type += " unsigned"

    return ColumnDefinition(
        type=column_type,
        datatype=datatype,
        size=size,
        length=size if datatype in CHARACTER_TYPES else 0,
        unsigned=unsigned,
        nullable=nullable,
        default=default,
        auto_increment=auto_increment,
        primary=primary
    )

#
# ALTER TABLE
#

def _split_alter(text: str) -> tuple[Optional[str], Optional[str], str]:
    """Split an ALTER statement into (table, raw table name, clause text)."""
    text = text.strip().rstrip(";").strip()
    if header := _ALTER_HEADER.match(text):
        return unquote_identifier(header.group(1)), header.group(1), text[header.end():]
    return None, None, text

def parse_alter_clause(text: str) -> Optional[AlterClause]:
    """Parse a single-clause ALTER TABLE statement.

    The clause is matched against PRIMARY KEY, MODIFY, FOREIGN KEY,
    (UNIQUE) KEY and ADD COLUMN patterns, in that order;
    the first pattern that matches determines the variant.

    Args
    ----
    text : str
        ALTER TABLE statement (or a bare clause such as "ADD KEY `k` (`a`)")

    Returns
    -------
    Optional[AlterClause]
        Parsed clause, None if no pattern matches

    Examples
    --------
    `ALTER TABLE `d_user` ADD UNIQUE KEY `email` (`email`)`
    should return:

    AlterClause(kind=AlterType.UNIQUE, table='d_user', columns=['email'], name='email')
    """
    table, _, body = _split_alter(text)

    if match := _PRIMARY_CLAUSE.match(body):
        close_pos = _find_closing_paren(body, match.end())
        if close_pos < 0:
            return None
        return AlterClause(
            AlterType.PRIMARY, table,
            columns=_key_columns(body[match.end()+1:close_pos])
        )

    if match := _MODIFY_CLAUSE.match(body):
        definition = parse_column_definition(match.group(2))
        if definition is None:
            return None
        column = unquote_identifier(match.group(1))
        return AlterClause(AlterType.MODIFY, table, columns=[column], definition=definition)

    if match := _FOREIGN_CLAUSE.match(body):
        close_pos = _find_closing_paren(body, match.end())
        if close_pos < 0:
            return None
        columns = _key_columns(body[match.end()+1:close_pos])

        rest = body[close_pos+1:]
        if not (ref_match := _REFERENCES.match(rest)):
            return None
        ref_close = _find_closing_paren(rest, ref_match.end())
        if ref_close < 0:
            return None

        return AlterClause(
            AlterType.FOREIGN, table,
            columns=columns,
            name=unquote_identifier(match.group(1)) if match.group(1) else "",
            reference=ForeignReference(
                unquote_identifier(ref_match.group(1)),
                _key_columns(rest[ref_match.end()+1:ref_close])
            )
        )

    if match := _KEY_CLAUSE.match(body):
        close_pos = _find_closing_paren(body, match.end())
        if close_pos < 0:
            return None
        columns = _key_columns(body[match.end()+1:close_pos])
        if not columns:
            return None

        kind = AlterType.UNIQUE if match.group(1).upper().startswith("UNIQUE") \
               else AlterType.INDEX
        name = unquote_identifier(match.group(2)) if match.group(2) else columns[0]
        return AlterClause(kind, table, columns=columns, name=name)

    if match := _ADD_COLUMN_CLAUSE.match(body):
        raw_name = match.group(1)
        if not raw_name.startswith(("`", '"')) and raw_name.upper() in _CLAUSE_KEYWORDS:
            return None
        definition = parse_column_definition(match.group(2))
        if definition is None:
            return None
        return AlterClause(
            AlterType.ADD_COLUMN, table,
            columns=[unquote_identifier(raw_name)], definition=definition
        )

    return None

def split_multi_clause_alter(text: str) -> list[str]:
    """Convert an ALTER statement with several ADD/MODIFY clauses into
    one ALTER statement per clause.

    If one of the statements fails, it does not affect the others.
    Commas inside parentheses or quotes never split a clause, so trailing
    `REFERENCES ... ON DELETE ...` or `USING BTREE` qualifiers stay with
    their clause. Table options such as `AUTO_INCREMENT=3` are kept with
    the clause before them.

    Args
    ----
    text : str
        ALTER TABLE statement

    Returns
    -------
    list[str]
        ``ALTER TABLE `name` <clause>`` for every clause if more than one
        ADD/MODIFY clause is present, otherwise `[text]`
    """
    table, raw_table, body = _split_alter(text)
    if table is None:
        return [text]

    clauses: list[str] = []
    for fragment in split_top_level(body):
        if not fragment:
            continue
        if clauses and not _ALTER_ACTION.match(fragment):
            # table option such as `AUTO_INCREMENT=3`
            clauses[-1] += f", {fragment}"
        else:
            clauses.append(fragment)

    count = sum(1 for clause in clauses if re.match(r"(?:ADD|MODIFY)\b", clause, re.I))
    if count <= 1:
        return [text]

    name = quote_identifier(raw_table)
    return [f"ALTER TABLE {name} {clause}" for clause in clauses]

def split_alter_key_and_foreign_key(alters: list[str]) -> tuple[list[str], list[str]]:
    """Split ALTER statements into key statements and FOREIGN KEY statements.

    Returns
    -------
    list[str]
        ALTER statements that do not contain a FOREIGN KEY
    list[str]
        ALTER statements that contain a FOREIGN KEY
    """
    keys, foreign = [], []
    for alter in alters:
        if re.search(r"FOREIGN\s+KEY", alter, re.I):
            foreign.append(alter)
        else:
            keys.append(alter)
    return keys, foreign

#
# INSERT
#

def split_multi_value_insert(text: str) -> list[str]:
    """Convert an INSERT statement with several value tuples into
    one INSERT statement per tuple.

    Args
    ----
    text : str
        INSERT statement

    Returns
    -------
    list[str]
        Single-tuple INSERT statements with the same table and column list,
        or `[text]` if the statement is not an `INSERT ... VALUES` statement

    Examples
    --------
    >>> split_multi_value_insert("INSERT INTO `d_lab` (`code`, `name`) VALUES ('LT', 'Tematik'), ('SKJ', 'Kaya')")
    ["INSERT INTO `d_lab` (`code`, `name`) VALUES ('LT', 'Tematik')", "INSERT INTO `d_lab` (`code`, `name`) VALUES ('SKJ', 'Kaya')"]
    """
    stripped = text.strip().rstrip(";").strip()
    header = _INSERT_HEADER.match(stripped)
    if not header:
        return [text]

    rest = stripped[header.end():]
    tuples = []
    pos = 0
    while pos < len(rest):
        char = rest[pos]
        if char.isspace() or char == ",":
            pos += 1
        elif char == "(":
            close_pos = _find_closing_paren(rest, pos)
            if close_pos < 0:
                return [text]
            tuples.append(rest[pos:close_pos+1])
            pos = close_pos + 1
        else:
            break

    if not tuples:
        return [text]

    # e.g. ON DUPLICATE KEY UPDATE ...
    tail = rest[pos:].strip()
    head = " ".join(header.group(1).split())
    columns = header.group(2)

    inserts = []
    for values in tuples:
        parts = [head, columns, "VALUES", values, tail]
        inserts.append(" ".join(p for p in parts if p))
    return inserts

#
# CREATE TABLE
#

def strip_column_definition_from_create(text: str) -> StrippedCreate:
    """Move key definitions inside CREATE TABLE into ALTER statements.

    `PRIMARY KEY`, `UNIQUE KEY`, `KEY` and `CONSTRAINT ... FOREIGN KEY` lines
    are removed from the CREATE TABLE body and returned as
    ``ALTER TABLE `name` ADD ...`` statements.
    AUTO_INCREMENT of the first auto-increment column is removed from the body
    and set again by a trailing ``ALTER TABLE `name` MODIFY ...`` statement,
    because AUTO_INCREMENT requires a key on the column.

    Args
    ----
    text : str
        CREATE TABLE statement

    Returns
    -------
    StrippedCreate
        Reduced CREATE TABLE statement and the relocated ALTER statements.
        If nothing is relocated, the statement is returned unchanged.
    """
    query = text.strip().rstrip(";").rstrip()
    table = get_name_from_query(StatementType.CREATE_TABLE, query)
    span = _create_table_body(query)
    if table is None or span is None:
        return StrippedCreate(query=text.strip())

    open_pos, close_pos = span
    header = query[:open_pos].rstrip()
    options = query[close_pos+1:].strip()
    name = quote_identifier(_NAME_PATTERNS[StatementType.CREATE_TABLE].match(query).group(1))

    columns: list[str] = []
    alters: list[str] = []
    for part in split_top_level(query[open_pos+1:close_pos]):
        if not part:
            continue
        if _RELOCATED_KEY_LINE.match(part):
            alters.append(f"ALTER TABLE {name} ADD {' '.join(part.split())}")
        else:
            columns.append(part)

    auto_increment = None
    for idx, part in enumerate(columns):
        if _KEY_LINE.match(part) or not (col_match := re.match(rf"({IDENT})\s+(.+)$", part, re.S)):
            continue

        masked = _mask_literals(part)
        token = re.search(r"\s*\bAUTO_INCREMENT\b(?!\s*=)", masked, re.I)
        if not token:
            continue
        if re.search(r"\b(?:PRIMARY\s+KEY|UNIQUE)\b", masked, re.I):
            # the key is created together with the column
            break

        auto_increment = (quote_identifier(col_match.group(1)), col_match.group(2).strip())
        columns[idx] = part[:token.start()] + part[token.end():]
        break

    if auto_increment:
        modify = f"ALTER TABLE {name} MODIFY {auto_increment[0]} {auto_increment[1]}"
        if start := re.search(r"\bAUTO_INCREMENT\s*=\s*(\d+)", options, re.I):
            modify += f", AUTO_INCREMENT={start.group(1)}"
            options = re.sub(r"\s*\bAUTO_INCREMENT\s*=\s*\d+", "", options, flags=re.I).strip()
        alters.append(modify)

    if not alters:
        return StrippedCreate(query=query)

    reduced = f"{header} (\n  " + ",\n  ".join(columns) + "\n)"
    if options:
        reduced += f" {options}"
    return StrippedCreate(query=reduced, alters=alters)
