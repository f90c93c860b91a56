OPCODES = (
    # stack
    "PUSH", "DUP", "COPY", "SWAP", "POP", "SLIDE",
    # arithmetic
    "ADD", "SUB", "MUL", "DIV", "MOD",
    # heap
    "STORE", "RETRIEVE",
    # flow control
    "CALL", "JUMP", "JUMP_IF_ZERO", "JUMP_IF_NEG", "RETURN", "END",
    # io
    "OUTPUT_CHAR", "OUTPUT_NUM", "READ_CHAR", "READ_NUM",
)

JUMP_OPCODES = ("CALL", "JUMP", "JUMP_IF_ZERO", "JUMP_IF_NEG")

# placeholder target for jumps whose label is not resolved yet
UNRESOLVED = None


class BytecodeProgram:
    def __init__(self):
        self.consts = []         # int64 literals referenced by PUSH
        self.instructions = []   # list of (OPCODE, arg)
        self.lines = []          # source line per instruction
        self.sub_labels = {}     # call target pc -> label (tracebacks only)

    def __len__(self):
        return len(self.instructions)

    def add_const(self, value):
        # reuse constants if already added
        if value in self.consts:
            return self.consts.index(value)
        self.consts.append(value)
        return len(self.consts) - 1

    def emit(self, opcode, arg=None, line=None):
        # returns instruction index (useful for jumps)
        if opcode not in OPCODES:
            raise ValueError(f"Unknown opcode: {opcode}")
        self.instructions.append((opcode, arg))
        self.lines.append(line)
        return len(self.instructions) - 1

    def patch(self, index, arg):
        opcode, _ = self.instructions[index]
        self.instructions[index] = (opcode, arg)

    def add_sub_label(self, pc, label):
        self.sub_labels[pc] = label

    def instruction_at(self, index):
        return self.instructions[index]

    def const_at(self, index):
        return self.consts[index]

    def line_at(self, index):
        return self.lines[index]

    def label_at(self, pc):
        return self.sub_labels.get(pc)
