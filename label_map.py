class LabelMap:
    """Parse-time bookkeeping for labels.

    ``labels`` maps a label to the program counter it was declared at (a
    later declaration of the same label overwrites the earlier one).
    ``jumps`` maps the index of every jump/call instruction to the label it
    references, waiting to be patched once the whole source has been read.
    """

    def __init__(self):
        self.labels = {}  # label -> pc
        self.jumps = {}   # instruction index -> label

    def add_label(self, label: int, pc: int):
        self.labels[label] = pc

    def add_jump(self, index: int, label: int):
        self.jumps[index] = label

    def get_pc(self, label: int):
        return self.labels.get(label)

    def iter_jumps(self):
        # in emission order, so the first bad reference is the one reported
        return iter(sorted(self.jumps.items()))

    def __len__(self):
        return len(self.jumps)
