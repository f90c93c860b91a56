SPACE = "SPACE"
TAB = "TAB"
LF = "LF"

SYMBOLS = {
    " ": SPACE,
    "\t": TAB,
    "\n": LF,
}


class Token:
    def __init__(self, type, line=1):
        self.type = type
        self.line = line

    def __repr__(self):
        return f"{self.type}@{self.line}"


class Lexer:
    """Turns source text into SPACE/TAB/LF tokens.

    Every other character is a comment and is skipped without touching the
    line counter. ``line`` is always the line of the next token to be read.
    """

    def __init__(self, text):
        if isinstance(text, (bytes, bytearray)):
            text = text.decode("utf-8", errors="replace")
        self.text = text
        self.pos = 0
        self.line = 1

    def get_next_token(self):
        text = self.text
        while self.pos < len(text):
            ch = text[self.pos]
            self.pos += 1
            kind = SYMBOLS.get(ch)
            if kind is None:
                continue
            tok = Token(kind, line=self.line)
            if kind == LF:
                self.line += 1
            return tok
        return None

    def __iter__(self):
        while True:
            tok = self.get_next_token()
            if tok is None:
                return
            yield tok
