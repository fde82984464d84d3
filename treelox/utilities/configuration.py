from enum import Flag, auto


class Debug(Flag):
    DUMP_TOKENS = auto()
    JAVA_STYLE_TOKENS = auto()
    DUMP_LOCALS = auto()
    NO_RESOLVE = auto()
    NO_INTERPRET = auto()
