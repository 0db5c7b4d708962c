"""Unified syntax kinds for parser and CST."""

from enum import IntEnum

from nxpy.lexer import TokenKind


class NxSyntaxKind(IntEnum):
    """Language syntax vocabulary (tokens + nodes).

    Token kinds share their numeric values with `TokenKind`.
    """

    TOMBSTONE = 0
    EOF = 1

    # Trivia tokens
    WHITESPACE = 10
    NEWLINE = 11
    COMMENT = 12
    SKIPPED = 13

    # Lexical tokens
    IDENTIFIER = 20
    MARKUP_IDENTIFIER = 21
    STRING = 22
    INT = 23
    REAL = 24
    HEX = 25

    IMPORT_KW = 30
    TYPE_KW = 31
    ENUM_KW = 32
    LET_KW = 33
    IF_KW = 34
    ELSE_KW = 35
    IS_KW = 36
    FOR_KW = 37
    IN_KW = 38
    TRUE_KW = 39
    FALSE_KW = 40
    NULL_KW = 41
    RAW_KW = 42  # contextual, remapped from IDENTIFIER inside tags

    EQUAL = 50
    EQUAL_EQUAL = 51
    NOT_EQUAL = 52
    LESS_THAN_OR_EQUAL = 53
    GREATER_THAN_OR_EQUAL = 54
    LESS_THAN = 55
    GREATER_THAN = 56
    PLUS = 57
    MINUS = 58
    STAR = 59
    SLASH = 60
    AMP_AMP = 61
    PIPE_PIPE = 62
    PIPE = 63
    QUESTION = 64
    FAT_ARROW = 65

    COLON = 70
    COMMA = 71
    DOT = 72
    LBRACE = 73
    RBRACE = 74
    LPAREN = 75
    RPAREN = 76
    LBRACKET = 77
    RBRACKET = 78
    AT_LBRACE = 79

    TEXT_CHUNK = 90
    ENTITY = 91
    ESCAPED_LBRACE = 92
    ESCAPED_RBRACE = 93
    ESCAPED_AT = 94
    RAW_TEXT_CHUNK = 95

    # Node kinds
    ROOT = 1000
    ERROR = 1001

    # Module level
    MODULE_DEFINITION = 1010
    IMPORT_STATEMENT = 1011
    TYPE_DEFINITION = 1012
    ENUM_DEFINITION = 1013
    ENUM_MEMBER_LIST = 1014
    ENUM_MEMBER = 1015
    VALUE_DEFINITION = 1016
    FUNCTION_DEFINITION = 1017
    PROPERTY_DEFINITION = 1018
    TYPE = 1019
    PRIMITIVE_TYPE = 1020
    USER_DEFINED_TYPE = 1021

    # Markup
    ELEMENT = 1030
    PROPERTY_LIST = 1031
    PROPERTY_VALUE = 1032
    ELEMENTS_EXPRESSION = 1033
    MIXED_CONTENT = 1034
    TEXT_CONTENT = 1035
    TEXT_RUN = 1036
    EMBED_CONTENT = 1037
    EMBED_TEXT_RUN = 1038
    EMBED_INTERPOLATION_EXPRESSION = 1039
    RAW_TEXT_RUN = 1040
    INTERPOLATION_EXPRESSION = 1041

    # Value expressions
    BINARY_EXPRESSION = 1050
    PREFIX_UNARY_EXPRESSION = 1051
    CALL_EXPRESSION = 1052
    ARGUMENT_LIST = 1053
    MEMBER_ACCESS_EXPRESSION = 1054
    CONDITIONAL_EXPRESSION = 1055
    IDENTIFIER_EXPRESSION = 1056
    UNIT_LITERAL = 1057
    PARENTHESIZED_EXPRESSION = 1058

    # Literals
    STRING_LITERAL = 1060
    INT_LITERAL = 1061
    REAL_LITERAL = 1062
    HEX_LITERAL = 1063
    BOOL_LITERAL = 1064
    NULL_LITERAL = 1065

    # Names and patterns
    QUALIFIED_NAME = 1070
    QUALIFIED_MARKUP_NAME = 1071
    PATTERN = 1072

    # Control constructs, one family per body domain
    VALUE_IF_SIMPLE_EXPRESSION = 1100
    VALUE_IF_MATCH_EXPRESSION = 1101
    VALUE_IF_MATCH_ARM = 1102
    VALUE_IF_CONDITION_LIST_EXPRESSION = 1103
    VALUE_IF_CONDITION_ARM = 1104
    VALUE_FOR_EXPRESSION = 1105

    ELEMENTS_IF_SIMPLE_EXPRESSION = 1110
    ELEMENTS_IF_MATCH_EXPRESSION = 1111
    ELEMENTS_IF_MATCH_ARM = 1112
    ELEMENTS_IF_CONDITION_LIST_EXPRESSION = 1113
    ELEMENTS_IF_CONDITION_ARM = 1114
    ELEMENTS_FOR_EXPRESSION = 1115

    PROPERTY_LIST_IF_SIMPLE_EXPRESSION = 1120
    PROPERTY_LIST_IF_MATCH_EXPRESSION = 1121
    PROPERTY_LIST_IF_MATCH_ARM = 1122
    PROPERTY_LIST_IF_CONDITION_LIST_EXPRESSION = 1123
    PROPERTY_LIST_IF_CONDITION_ARM = 1124
    PROPERTY_LIST_FOR_EXPRESSION = 1125

    @property
    def is_trivia(self) -> bool:
        return self in (
            NxSyntaxKind.WHITESPACE,
            NxSyntaxKind.NEWLINE,
            NxSyntaxKind.COMMENT,
            NxSyntaxKind.SKIPPED,
        )

    @property
    def is_token(self) -> bool:
        return self != NxSyntaxKind.TOMBSTONE and self.value < NxSyntaxKind.ROOT.value

    @property
    def is_node(self) -> bool:
        return self.value >= NxSyntaxKind.ROOT.value

    @property
    def is_literal(self) -> bool:
        return NxSyntaxKind.STRING_LITERAL <= self <= NxSyntaxKind.NULL_LITERAL

    @property
    def is_control(self) -> bool:
        return NxSyntaxKind.VALUE_IF_SIMPLE_EXPRESSION <= self <= NxSyntaxKind.PROPERTY_LIST_FOR_EXPRESSION

    @staticmethod
    def from_token_kind(kind: TokenKind) -> "NxSyntaxKind":
        try:
            return NxSyntaxKind[kind.name]
        except KeyError:
            raise ValueError(f"Unsupported TokenKind mapping: {kind!r}") from None
