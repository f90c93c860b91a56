import sys

from bytecode import BytecodeProgram, UNRESOLVED
from errors import (
    InvalidInstruction,
    InvalidLabel,
    InvalidLiteral,
    LiteralOverflow,
    TooManyLabels,
    UnexpectedEof,
)
from label_map import LabelMap
from lexer import LF, SPACE, TAB, Lexer

INT64_MAX = (1 << 63) - 1
LABEL_MAX = sys.maxsize


class Parser:
    def __init__(self, lexer):
        self.lexer = lexer
        self.current_token = self.lexer.get_next_token()
        self.labels = LabelMap()
        self.program = BytecodeProgram()

    def advance(self):
        self.current_token = self.lexer.get_next_token()

    def error_line(self):
        if self.current_token is not None:
            return self.current_token.line
        return self.lexer.line

    # consume the current token, but only if it is of the given type
    def match(self, token_type):
        if self.current_token is not None and self.current_token.type == token_type:
            self.advance()
            return True
        return False

    def take(self):
        tok = self.current_token
        if tok is None:
            return None
        self.advance()
        return tok.type

    def take_two(self):
        first = self.take()
        second = self.take()
        if first is None or second is None:
            raise UnexpectedEof(self.error_line())
        return first, second

    def emit(self, opcode, arg=None, line=None):
        return self.program.emit(opcode, arg, line=line)

    # ---------- TOP LEVEL ----------
    def parse(self):
        if self.labels is None:
            raise RuntimeError("Parser.parse() can only be called once")

        while self.current_token is not None:
            line = self.current_token.line
            if self.match(SPACE):
                self.stack_instruction(line)
            elif self.match(TAB):
                if self.match(SPACE):
                    self.arith_instruction(line)
                elif self.match(TAB):
                    self.heap_instruction(line)
                elif self.match(LF):
                    self.io_instruction(line)
                else:
                    raise InvalidInstruction("prefix", self.error_line())
            elif self.match(LF):
                self.flow_instruction(line)

        self.patch_jumps()
        return self.program

    # ---------- LITERALS ----------
    def read_bits(self, limit, overflow_error):
        # bits are most-significant first, terminated by LF
        value = 0
        while True:
            tok = self.current_token
            if tok is None:
                raise UnexpectedEof(self.lexer.line)
            self.advance()
            if tok.type == LF:
                return value
            value <<= 1
            if tok.type == TAB:
                value |= 1
            if value > limit:
                raise overflow_error(tok.line)

    def number(self):
        if self.match(SPACE):
            negative = False
        elif self.match(TAB):
            negative = True
        else:
            raise InvalidLiteral(self.error_line())

        value = self.read_bits(INT64_MAX, LiteralOverflow)
        return -value if negative else value

    def label(self):
        return self.read_bits(LABEL_MAX, TooManyLabels)

    # ---------- INSTRUCTIONS ----------
    def stack_instruction(self, line):
        if self.match(SPACE):
            k = self.program.add_const(self.number())
            self.emit("PUSH", k, line)
            return

        suffix = self.take_two()
        if suffix == (TAB, SPACE):
            self.emit("COPY", self.number(), line)
        elif suffix == (TAB, LF):
            self.emit("SLIDE", self.number(), line)
        elif suffix == (LF, SPACE):
            self.emit("DUP", line=line)
        elif suffix == (LF, TAB):
            self.emit("SWAP", line=line)
        elif suffix == (LF, LF):
            self.emit("POP", line=line)
        else:
            raise InvalidInstruction("stack", self.error_line())

    def arith_instruction(self, line):
        opcode = {
            (SPACE, SPACE): "ADD",
            (SPACE, TAB): "SUB",
            (SPACE, LF): "MUL",
            (TAB, SPACE): "DIV",
            (TAB, TAB): "MOD",
        }.get(self.take_two())
        if opcode is None:
            raise InvalidInstruction("arithmetic", self.error_line())
        self.emit(opcode, line=line)

    def heap_instruction(self, line):
        if self.match(SPACE):
            self.emit("STORE", line=line)
        elif self.match(TAB):
            self.emit("RETRIEVE", line=line)
        else:
            raise InvalidInstruction("heap", self.error_line())

    def io_instruction(self, line):
        opcode = {
            (SPACE, SPACE): "OUTPUT_CHAR",
            (SPACE, TAB): "OUTPUT_NUM",
            (TAB, SPACE): "READ_CHAR",
            (TAB, TAB): "READ_NUM",
        }.get(self.take_two())
        if opcode is None:
            raise InvalidInstruction("io", self.error_line())
        self.emit(opcode, line=line)

    def flow_instruction(self, line):
        suffix = self.take_two()

        if suffix == (SPACE, SPACE):
            # a mark points at the next instruction to be emitted
            self.labels.add_label(self.label(), len(self.program))
            return

        jump_opcode = {
            (SPACE, TAB): "CALL",
            (SPACE, LF): "JUMP",
            (TAB, SPACE): "JUMP_IF_ZERO",
            (TAB, TAB): "JUMP_IF_NEG",
        }.get(suffix)
        if jump_opcode is not None:
            label = self.label()
            index = self.emit(jump_opcode, UNRESOLVED, line)
            self.labels.add_jump(index, label)
        elif suffix == (TAB, LF):
            self.emit("RETURN", line=line)
        elif suffix == (LF, LF):
            self.emit("END", line=line)
        else:
            raise InvalidInstruction("flow", self.error_line())

    # ---------- LABEL RESOLUTION ----------
    def patch_jumps(self):
        for index, label in self.labels.iter_jumps():
            pc = self.labels.get_pc(label)
            if pc is None:
                raise InvalidLabel(self.program.line_at(index))

            opcode, _ = self.program.instruction_at(index)
            self.program.patch(index, pc)
            if opcode == "CALL":
                self.program.add_sub_label(pc, label)

        # labels are gone once every target is a program counter
        self.labels = None


def parse(source):
    return Parser(Lexer(source)).parse()
