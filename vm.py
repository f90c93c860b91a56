import re
import sys

from errors import (
    InvalidHeapEntry,
    IoError,
    NumParseError,
    StackUnderflow,
    StepLimitExceeded,
    TraceEntry,
    WhitespaceError,
    ZeroDivision,
)

INT64_MIN = -(1 << 63)
INT64_MAX = (1 << 63) - 1

_NUMBER_RE = re.compile(rb"[+-]?[0-9]+")


def wrap_i64(value: int) -> int:
    return ((value - INT64_MIN) & 0xFFFFFFFFFFFFFFFF) + INT64_MIN


def trunc_div(left: int, right: int) -> int:
    # round toward zero, like a native 64-bit division
    q = abs(left) // abs(right)
    return q if (left < 0) == (right < 0) else -q


def trunc_mod(left: int, right: int) -> int:
    return left - right * trunc_div(left, right)


class CallFrame:
    def __init__(self, pc: int = 0, label: int | None = None):
        self.pc = pc
        self.label = label  # None for the top-level frame

    def __repr__(self):
        return f"CallFrame(pc={self.pc}, label={self.label})"


class VM:
    def __init__(self, bytecode_program, stdin=None, stdout=None, max_steps=None):
        self.program = bytecode_program
        self.instructions = bytecode_program.instructions

        # binary streams
        self.stdin = stdin if stdin is not None else sys.stdin.buffer
        self.stdout = stdout if stdout is not None else sys.stdout.buffer

        self.max_steps = max_steps  # set to an int to guard against infinite loops
        self.trace_enabled = False

        self.stack = []                   # int64 operands
        self.heap = {}                    # address -> value, sparse
        self.call_stack = [CallFrame()]   # bottom frame is main()
        self.finished = False

    # ---------- errors ----------
    def build_stacktrace(self):
        frames = []
        innermost = len(self.call_stack) - 1
        for depth, fr in enumerate(self.call_stack):
            # the innermost pc has already moved past the failing instruction;
            # callers report the instruction they resume at
            index = fr.pc
            if depth == innermost or index >= len(self.instructions):
                index = max(fr.pc - 1, 0)
            line = self.program.line_at(index) if index < len(self.instructions) else None
            frames.append(TraceEntry(line, fr.label))
        return frames

    def runtime_error(self, error_cls):
        return error_cls(frames=self.build_stacktrace())

    # ---------- stack helpers ----------
    def require(self, count: int):
        if len(self.stack) < count:
            raise self.runtime_error(StackUnderflow)

    def pop(self):
        if not self.stack:
            raise self.runtime_error(StackUnderflow)
        return self.stack.pop()

    def peek(self):
        if not self.stack:
            raise self.runtime_error(StackUnderflow)
        return self.stack[-1]

    def binary(self, op):
        self.require(2)
        right = self.stack.pop()
        left = self.stack.pop()
        self.stack.append(wrap_i64(op(left, right)))

    # ---------- io helpers ----------
    def write(self, data: bytes):
        try:
            self.stdout.write(data)
            self.stdout.flush()
        except (OSError, ValueError):
            raise self.runtime_error(IoError) from None

    def read_byte(self):
        try:
            data = self.stdin.read(1)
        except (OSError, ValueError):
            raise self.runtime_error(IoError) from None
        if not data:
            raise self.runtime_error(IoError)
        return data[0]

    def read_number(self):
        try:
            line = self.stdin.readline()
        except (OSError, ValueError):
            raise self.runtime_error(IoError) from None

        text = line.rstrip()
        if not _NUMBER_RE.fullmatch(text):
            raise self.runtime_error(NumParseError)
        value = int(text)
        if value < INT64_MIN or value > INT64_MAX:
            raise self.runtime_error(NumParseError)
        return value

    # ---------- execution ----------
    def step(self) -> bool:
        frame = self.call_stack[-1]
        pc = frame.pc
        if pc >= len(self.instructions):
            # ran off the end of the program
            return True

        opcode, arg = self.instructions[pc]

        if self.trace_enabled:
            print(f"TRACE pc={pc:04d} {(opcode, arg)!r} stack={len(self.stack)}", file=sys.stderr)

        frame.pc += 1

        if opcode == "PUSH":
            self.stack.append(self.program.const_at(arg))
            return False

        if opcode == "DUP":
            self.stack.append(self.peek())
            return False

        if opcode == "COPY":
            if arg < 0 or len(self.stack) < arg + 1:
                raise self.runtime_error(StackUnderflow)
            self.stack.append(self.stack[-1 - arg])
            return False

        if opcode == "SWAP":
            self.require(2)
            self.stack[-1], self.stack[-2] = self.stack[-2], self.stack[-1]
            return False

        if opcode == "POP":
            self.pop()
            return False

        if opcode == "SLIDE":
            if arg < 0 or len(self.stack) < arg + 1:
                raise self.runtime_error(StackUnderflow)
            if arg:
                top = len(self.stack) - 1
                del self.stack[top - arg:top]
            return False

        if opcode == "ADD":
            self.binary(lambda a, b: a + b)
            return False

        if opcode == "SUB":
            self.binary(lambda a, b: a - b)
            return False

        if opcode == "MUL":
            self.binary(lambda a, b: a * b)
            return False

        if opcode in ("DIV", "MOD"):
            self.require(2)
            if self.stack[-1] == 0:
                raise self.runtime_error(ZeroDivision)
            self.binary(trunc_div if opcode == "DIV" else trunc_mod)
            return False

        if opcode == "STORE":
            self.require(2)
            value = self.stack.pop()
            address = self.stack.pop()
            self.heap[address] = value
            return False

        if opcode == "RETRIEVE":
            address = self.peek()
            if address not in self.heap:
                raise self.runtime_error(InvalidHeapEntry)
            self.stack[-1] = self.heap[address]
            return False

        if opcode == "CALL":
            self.call_stack.append(CallFrame(arg, self.program.label_at(arg)))
            return False

        if opcode == "JUMP":
            frame.pc = arg
            return False

        if opcode == "JUMP_IF_ZERO":
            if self.pop() == 0:
                frame.pc = arg
            return False

        if opcode == "JUMP_IF_NEG":
            if self.pop() < 0:
                frame.pc = arg
            return False

        if opcode == "RETURN":
            self.call_stack.pop()
            return not self.call_stack

        if opcode == "END":
            return True

        if opcode == "OUTPUT_CHAR":
            value = self.peek()
            self.write(chr(value & 0xFF).encode("utf-8"))
            self.stack.pop()
            return False

        if opcode == "OUTPUT_NUM":
            value = self.peek()
            self.write(str(value).encode("ascii"))
            self.stack.pop()
            return False

        if opcode == "READ_CHAR":
            address = self.peek()
            value = self.read_byte()
            self.stack.pop()
            self.heap[address] = value
            return False

        if opcode == "READ_NUM":
            address = self.peek()
            value = self.read_number()
            self.stack.pop()
            self.heap[address] = value
            return False

        raise WhitespaceError(f"Unknown opcode: {opcode}")

    def run(self):
        if self.finished:
            raise WhitespaceError("a VM runs its program only once")

        steps = 0
        try:
            while True:
                if self.max_steps is not None:
                    steps += 1
                    if steps > self.max_steps:
                        raise StepLimitExceeded(self.max_steps)

                halted = self.step()
                if halted:
                    break
        finally:
            self.finished = True
