"""
Core data structures for schema toolkit.

This module defines the core data structures shared by the statement splitter,
the DDL parser, the dependency resolver, the schema builder and the comparator.

Classes
-------
- `StatementType`: Classification tag of a top-level statement
- `RawStatement`: Classified statement text
- `KeyMembership`: UNIQUE / INDEX key a column belongs to
- `ForeignKeyMembership`: FOREIGN KEY constraint a column belongs to
- `ColumnDefinition`: Column definition
- `AlterType`: Variant tag of an ALTER clause
- `ForeignReference`: Table and columns referenced by a FOREIGN KEY
- `AlterClause`: Parsed single ALTER clause
- `TableSchema`: Table structure (column name -> definition)
- `StrippedCreate`: CREATE TABLE reduced to its column lines
- `DumpNames`: Names of the objects present in a dump
- `ParsedDump`: Statement buckets of a parsed dump
- `DependencyGraph`: Table -> referenced tables
- `SortResult`: Result of the topological sort
- `ErrorFlag`: Bit flags of the comparison result
- `DiffEntry`: Single column difference
- `ComparisonResult`: Result of a schema comparison
"""
from dataclasses import dataclass, field
from enum import Enum, IntFlag, auto
from typing import Optional



class StatementType(Enum):
    """Classification tag of a top-level statement."""
    CREATE_TABLE = auto()
    CREATE_VIEW = auto()
    CREATE_FUNCTION = auto()
    CREATE_PROCEDURE = auto()
    CREATE_TRIGGER = auto()
    ALTER = auto()
    INSERT = auto()
    DROP = auto()
    MISC = auto()

@dataclass(frozen=True)
class RawStatement:
    """Classified statement

    Attributes
    ----------
    text : str
        Trimmed statement text (without the terminating delimiter)
    kind : StatementType
        Classification of the statement
    name : Optional[str]
        Name of the object the statement targets, if it could be extracted
    """
    text: str
    kind: StatementType
    name: Optional[str] = None

#
# Column / table structure
#

@dataclass
class KeyMembership:
    """UNIQUE or INDEX key a column belongs to"""
    name: str
    """Key name"""
    columns: list[str] = field(default_factory=list)
    """Columns of the key, in key order"""

@dataclass
class ForeignKeyMembership:
    """FOREIGN KEY constraint a column belongs to"""
    name: str
    """Constraint name"""
    column: str
    """Local column"""
    ref_table: str
    """Referenced table"""
    ref_column: str
    """Referenced column"""

@dataclass
class ColumnDefinition:
    """Column definition

    Attributes
    ----------
    type : str
        Rendered column type (e.g. `varchar(64)`, `int(11) unsigned`)
    datatype : str
        Lower-cased type name (e.g. `varchar`)
    size : int
        First numeric argument of the type, 0 if there is none
    length : int
        Character length; only set for character types, otherwise 0
    unsigned : bool
        True if the column is UNSIGNED
    nullable : bool
        True if the column accepts NULL
    default : Optional[str]
        Default value, as written in the statement (e.g. `'abc'`, `NULL`)
    auto_increment : bool
        True if the column is AUTO_INCREMENT
    primary : bool
        True if the column is part of the PRIMARY KEY
    unique : list[KeyMembership]
        UNIQUE keys the column belongs to
    index : list[KeyMembership]
        Non-unique keys the column belongs to
    foreign : list[ForeignKeyMembership]
        FOREIGN KEY constraints the column belongs to
    """
    type: str
    datatype: str
    size: int = 0
    length: int = 0
    unsigned: bool = False
    nullable: bool = False
    default: Optional[str] = None
    auto_increment: bool = False
    primary: bool = False
    unique: list[KeyMembership] = field(default_factory=list)
    index: list[KeyMembership] = field(default_factory=list)
    foreign: list[ForeignKeyMembership] = field(default_factory=list)

DEFINITION_FIELDS: tuple[str, ...] = (
    "type", "datatype", "size", "length", "unsigned",
    "nullable", "default", "auto_increment"
)
"""Fields of `ColumnDefinition` that describe the column itself (not its keys)"""


class AlterType(Enum):
    """Variant tag of an ALTER clause."""
    PRIMARY = auto()
    MODIFY = auto()
    FOREIGN = auto()
    UNIQUE = auto()
    INDEX = auto()
    ADD_COLUMN = auto()

@dataclass
class ForeignReference:
    """Table and columns referenced by a FOREIGN KEY"""
    table: str
    columns: list[str] = field(default_factory=list)

@dataclass
class AlterClause:
    """Single parsed ALTER clause

    Attributes
    ----------
    kind : AlterType
        Variant of the clause
    table : Optional[str]
        Table targeted by the ALTER statement
    columns : list[str]
        Columns affected by the clause
    name : Optional[str]
        Key or constraint name (UNIQUE, INDEX and FOREIGN)
    definition : Optional[ColumnDefinition]
        New column definition (MODIFY and ADD_COLUMN)
    reference : Optional[ForeignReference]
        Referenced table and columns (FOREIGN)
    """
    kind: AlterType
    table: Optional[str]
    columns: list[str] = field(default_factory=list)
    name: Optional[str] = None
    definition: Optional[ColumnDefinition] = None
    reference: Optional[ForeignReference] = None

@dataclass
class TableSchema:
    """Table structure

    Attributes
    ----------
    name : str
        Table name
    columns : dict[str, ColumnDefinition]
        Column name -> column definition, in definition order

    Examples
    --------
    ```sql
    CREATE TABLE `d_lab` (
      `code` varchar(64) NOT NULL,
      `name` varchar(32) NOT NULL
    );
    ALTER TABLE `d_lab` ADD PRIMARY KEY (`code`);
    ```

    is represented as:

    ```python
    TableSchema(
        name='d_lab',
        columns={
            'code': ColumnDefinition(type='varchar(64)', datatype='varchar',
                                     size=64, length=64, primary=True),
            'name': ColumnDefinition(type='varchar(32)', datatype='varchar',
                                     size=32, length=32),
        }
    )
    ```
    """
    name: str
    columns: dict[str, ColumnDefinition] = field(default_factory=dict)

#
# Parse results
#

@dataclass
class StrippedCreate:
    """CREATE TABLE statement reduced to its column definitions"""
    query: str
    """Reduced CREATE TABLE statement"""
    alters: list[str] = field(default_factory=list)
    """ALTER statements relocated out of the CREATE TABLE body"""

@dataclass
class DumpNames:
    """Names of the objects present in a dump"""
    tables: list[str] = field(default_factory=list)
    views: list[str] = field(default_factory=list)
    functions: list[str] = field(default_factory=list)
    procedures: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)

@dataclass
class ParsedDump:
    """Statement buckets of a parsed SQL dump

    Attributes
    ----------
    functions, procedures, triggers : list[str]
        CREATE FUNCTION / PROCEDURE / TRIGGER statements
    tables : dict[str, list[str]]
        Table name -> reduced CREATE TABLE statements
    alters : list[str]
        Single-clause ALTER statements, in encounter order
    views : list[str]
        CREATE VIEW statements
    inserts : dict[str, list[str]]
        Table name -> INSERT statements, in encounter order
    drops : list[str]
        DROP statements
    misc : list[str]
        Statements that could not be classified
    order : list[str]
        Tables sorted so that referenced tables come first
    unresolved : list[str]
        Tables whose dependencies could not be resolved (cycle or
        reference to a table that is not in the dump)
    names : DumpNames
        Names of the objects present in the dump
    """
    functions: list[str] = field(default_factory=list)
    procedures: list[str] = field(default_factory=list)
    triggers: list[str] = field(default_factory=list)
    tables: dict[str, list[str]] = field(default_factory=dict)
    alters: list[str] = field(default_factory=list)
    views: list[str] = field(default_factory=list)
    inserts: dict[str, list[str]] = field(default_factory=dict)
    drops: list[str] = field(default_factory=list)
    misc: list[str] = field(default_factory=list)
    order: list[str] = field(default_factory=list)
    unresolved: list[str] = field(default_factory=list)
    names: DumpNames = field(default_factory=DumpNames)

DependencyGraph = dict[str, set[str]]
"""Table name -> names of the tables it references, in insertion order"""

@dataclass
class SortResult:
    """Result of the topological sort"""
    order: list[str] = field(default_factory=list)
    """Every table exactly once, referenced tables first"""
    unresolved: list[str] = field(default_factory=list)
    """Tables appended at the end because their dependencies were not met"""

#
# Comparison results
#

class ErrorFlag(IntFlag):
    """Bit flags describing how two schemas differ

    - REMOVED: a column exists only on the source side
    - MODIFIED: a column exists on both sides with different definitions
    - ADDED: a column exists only on the target side
    """
    NONE = 0x00
    REMOVED = 0x01
    MODIFIED = 0x02
    ADDED = 0x04

@dataclass(frozen=True)
class DiffEntry:
    """Difference of a single column

    `source` / `target` hold the rendered column description of each side,
    or None when the column does not exist on that side.
    """
    table: str
    column: str
    source: Optional[str] = None
    target: Optional[str] = None

    @property
    def flag(self) -> ErrorFlag:
        """Classification of the difference"""
        if self.source is not None and self.target is not None:
            return ErrorFlag.MODIFIED
        if self.source is not None:
            return ErrorFlag.REMOVED
        if self.target is not None:
            return ErrorFlag.ADDED
        return ErrorFlag.NONE

@dataclass
class ComparisonResult:
    """Result of a schema comparison

    Attributes
    ----------
    status : bool
        True if both schemas are identical
    diff : Optional[dict[str, dict[str, DiffEntry]]]
        Table name -> column name -> difference; None when `status` is True
    """
    status: bool = True
    diff: Optional[dict[str, dict[str, DiffEntry]]] = None

    @property
    def errno(self) -> ErrorFlag:
        """OR-combined flags of every diff entry (0 when identical)"""
        errno = ErrorFlag.NONE
        for columns in (self.diff or {}).values():
            for entry in columns.values():
                errno |= entry.flag
        return errno
