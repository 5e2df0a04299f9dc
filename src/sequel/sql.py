"""
SQL placeholder handling for named parameters.

Prepared commands bind parameters by name. The canonical named placeholder is
the DB-API ``pyformat`` style ``%(name)s``, which psycopg understands natively.
SQLite's driver expects ``:name`` instead, so SQL text is standardized per
dialect before it reaches the cursor:

    SQL → Tokenize → Rewrite named placeholders → Driver

String literals are tokenized separately so placeholder-like text inside
quotes is never rewritten. SQLite's native ``:name``, ``@name`` and ``$name``
placeholders pass through untouched.
"""
import re
from dataclasses import dataclass
from enum import Enum, auto

# =============================================================================
# Data Structures
# =============================================================================


class TokenType(Enum):
    """Token types identified during SQL parsing."""
    SQL_TEXT = auto()
    STRING_LITERAL = auto()
    POSITIONAL_PH = auto()      # %s or ?
    NAMED_PH = auto()           # %(name)s
    NATIVE_NAMED_PH = auto()    # :name, @name, $name


@dataclass(slots=True)
class Token:
    """Token from SQL parsing."""
    type: TokenType
    text: str
    start: int
    end: int
    name: str | None = None


# =============================================================================
# Regex Patterns
# =============================================================================

# Master tokenization pattern; '::' casts are consumed as plain text so that
# 'value::text' is not read as a ':text' placeholder
_TOKENIZE = re.compile(r"""
    (?P<string>'(?:[^']|'')*'|"(?:[^"]|"")*")
    |(?P<named>%\((?P<pname>[^)]+)\)s)
    |(?P<cast>::)
    |(?P<native>(?<![\w:])[:@$](?P<nname>[A-Za-z_]\w*))
    |(?P<percent_s>%s)
    |(?P<qmark>\?)
""", re.VERBOSE)

# =============================================================================
# Core Functions
# =============================================================================

def tokenize_sql(sql: str) -> list[Token]:
    """Parse SQL into tokens in a single pass.

    Parameters
        sql: SQL query string

    Returns
        List of tokens preserving all SQL text
    """
    tokens = []
    last_end = 0

    for match in _TOKENIZE.finditer(sql):
        start, end = match.span()

        if start > last_end:
            tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:start], last_end, start))

        if match.group('string'):
            tokens.append(Token(TokenType.STRING_LITERAL, match.group(), start, end))
        elif match.group('named'):
            tokens.append(Token(TokenType.NAMED_PH, match.group(), start, end,
                                name=match.group('pname')))
        elif match.group('native'):
            tokens.append(Token(TokenType.NATIVE_NAMED_PH, match.group(), start, end,
                                name=match.group('nname')))
        elif match.group('percent_s') or match.group('qmark'):
            tokens.append(Token(TokenType.POSITIONAL_PH, match.group(), start, end))
        else:
            tokens.append(Token(TokenType.SQL_TEXT, match.group(), start, end))

        last_end = end

    if last_end < len(sql):
        tokens.append(Token(TokenType.SQL_TEXT, sql[last_end:], last_end, len(sql)))

    return tokens


def named_placeholders(sql: str | None) -> list[str]:
    """Return the distinct placeholder names used in SQL, in order of appearance.

    >>> named_placeholders("select * from t where a = %(Key)s and b = :Value and c = '%(x)s'")
    ['Key', 'Value']
    """
    if not sql:
        return []
    names: list[str] = []
    for token in tokenize_sql(sql):
        if token.type in {TokenType.NAMED_PH, TokenType.NATIVE_NAMED_PH} and token.name not in names:
            names.append(token.name)
    return names


def standardize_named_placeholders(sql: str, dialect: str = 'postgresql') -> str:
    """Rewrite ``%(name)s`` placeholders into the dialect's named style.

    >>> standardize_named_placeholders('insert into t values (%(Key)s, %(Value)s)', 'sqlite')
    'insert into t values (:Key, :Value)'
    >>> standardize_named_placeholders("select '%(Key)s', %(Key)s", 'sqlite')
    "select '%(Key)s', :Key"
    >>> standardize_named_placeholders('select %(Key)s', 'postgresql')
    'select %(Key)s'
    """
    if not sql or dialect != 'sqlite' or '%(' not in sql:
        return sql

    result = []
    for token in tokenize_sql(sql):
        if token.type == TokenType.NAMED_PH:
            result.append(f':{token.name}')
        else:
            result.append(token.text)
    return ''.join(result)


if __name__ == '__main__':
    __import__('doctest').testmod(optionflags=4 | 8 | 32)
