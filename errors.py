class WhitespaceError(Exception):
    pass


# ---------- parse errors ----------

class ParseError(WhitespaceError):
    message = "Parse error."

    def __init__(self, line: int):
        super().__init__(self.message)
        self.line = line

    def format(self, indent: str = "") -> str:
        return f"{indent}[Line {self.line}] {self.message}"

    def __str__(self) -> str:
        return self.format()


class LiteralOverflow(ParseError):
    message = "Literal too large to fit in an i64."


class InvalidLiteral(ParseError):
    message = "Invalid literal."


class InvalidLabel(ParseError):
    message = "Invalid label."


class TooManyLabels(ParseError):
    message = "Program contains too many labels."


class UnexpectedEof(ParseError):
    message = "Unexpected end of file."


INSTRUCTION_FAMILIES = {
    "stack": "Invalid stack manipulation instruction.",
    "arithmetic": "Invalid arithmetic instruction.",
    "heap": "Invalid heap manipulation instruction.",
    "io": "Invalid IO instruction.",
    "flow": "Invalid control flow instruction.",
    "prefix": "Invalid instruction prefix.",
}


class InvalidInstruction(ParseError):
    def __init__(self, family: str, line: int):
        if family not in INSTRUCTION_FAMILIES:
            raise ValueError(f"unknown instruction family: {family}")
        self.family = family
        self.message = INSTRUCTION_FAMILIES[family]
        super().__init__(line)


# ---------- runtime errors ----------

class TraceEntry:
    def __init__(self, line: int, label: int | None = None):
        self.line = line
        self.label = label

    def __eq__(self, other):
        if not isinstance(other, TraceEntry):
            return NotImplemented
        return (self.line, self.label) == (other.line, other.label)

    def __repr__(self):
        return f"TraceEntry(line={self.line}, label={self.label})"

    def format(self) -> str:
        if self.label is None:
            return f"[Line {self.line}] in main()"
        return f"[Line {self.line}] in subroutine #{self.label}"


class WhitespaceRuntimeError(WhitespaceError):
    message = "Runtime error."

    def __init__(self, frames=None):
        super().__init__(self.message)
        self.frames = frames or []  # outermost first

    def format(self, indent: str = "") -> str:
        lines = [f"{indent}Stack traceback:"]
        for entry in self.frames:
            lines.append(f"{indent}{entry.format()}")
        lines.append(f"{indent}Error: {self.message}")
        return "\n".join(lines)

    def __str__(self) -> str:
        return self.format()


class ZeroDivision(WhitespaceRuntimeError):
    message = "Attempted to divide by zero"


class InvalidHeapEntry(WhitespaceRuntimeError):
    message = "Attempted to access invalid heap entry"


class IoError(WhitespaceRuntimeError):
    message = "An unexpected IO error occurred."


class NumParseError(WhitespaceRuntimeError):
    message = "Could not parse input as valid integer."


class StackUnderflow(WhitespaceRuntimeError):
    message = "The program stack underflowed."


class StepLimitExceeded(WhitespaceError):
    def __init__(self, limit: int):
        super().__init__(f"Step limit exceeded ({limit}), possible infinite loop")
        self.limit = limit
